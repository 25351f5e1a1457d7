"""Engine services: sessions, judges, answers, results, catalog, events, reporting."""
