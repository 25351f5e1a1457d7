"""CLI for Trivia Judge."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from trivia_judge import __version__
from trivia_judge.core.config import load_config, load_seed
from trivia_judge.core.errors import JudgingError
from trivia_judge.engine import JudgingEngine
from trivia_judge.services.reporting import (
    export_leaderboard,
    render_leaderboard,
    render_results,
)

T = TypeVar("T")

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="trivia-judge",
    help="Trivia Judge - scoring and session engine for live trivia judging",
    add_completion=False,
)
console = Console()

ConfigArg = Annotated[Path, typer.Argument(help="Path to config YAML file")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"trivia-judge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Trivia Judge CLI."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _with_engine(
    config_path: Path, verbose: bool, action: Callable[[JudgingEngine], Awaitable[T]]
) -> T:
    """Load config, run ``action`` against an engine, map failures to exit code 1."""
    _configure_logging(verbose)
    try:
        config = load_config(config_path)

        async def _run() -> T:
            async with JudgingEngine(config) as engine:
                return await action(engine)

        return asyncio.run(_run())

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except JudgingError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from e


@app.command("init-db")
def init_db(config_path: ConfigArg, verbose: VerboseOpt = False) -> None:
    """Create the database and all tables."""

    async def _init(engine: JudgingEngine) -> str:
        return engine.store.database_url

    url = _with_engine(config_path, verbose, _init)
    console.print(f"[green]Database ready:[/green] {url}")


@app.command()
def seed(
    config_path: ConfigArg,
    seed_path: Annotated[Path, typer.Argument(help="Path to seed YAML file")],
    strict: Annotated[
        bool, typer.Option("--strict", help="Reject questions no answer could score")
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Load teams and question banks from a seed file."""

    async def _seed(engine: JudgingEngine) -> dict[str, int]:
        return await engine.seed(load_seed(seed_path), strict=strict)

    counts = _with_engine(config_path, verbose, _seed)
    console.print("[green]Seed loaded![/green]")
    console.print(f"  Teams created: {counts['teams']}")
    console.print(f"  Banks created: {counts['banks']}")
    console.print(f"  Questions created: {counts['questions']}")


@app.command()
def leaderboard(
    config_path: ConfigArg,
    session_id: Annotated[str, typer.Argument(help="Session id")],
    export: Annotated[
        Path | None, typer.Option("--export", help="Write md/csv/json files to this directory")
    ] = None,
    verbose: VerboseOpt = False,
) -> None:
    """Show the leaderboard of a session."""

    async def _leaderboard(engine: JudgingEngine) -> tuple[str, list[Path]]:
        rows = await engine.get_leaderboard(session_id)
        precision = engine.config.result_precision
        paths: list[Path] = []
        if export is not None:
            paths = await export_leaderboard(rows, export, session_id, precision=precision)
        return render_leaderboard(rows, f"Leaderboard: {session_id}", precision=precision), paths

    report, paths = _with_engine(config_path, verbose, _leaderboard)
    console.print(report)
    for path in paths:
        console.print(f"[green]Saved:[/green] {path}")


@app.command()
def results(config_path: ConfigArg, verbose: VerboseOpt = False) -> None:
    """Show results of all ended sessions."""

    async def _results(engine: JudgingEngine) -> str:
        return render_results(
            await engine.all_results(), precision=engine.config.result_precision
        )

    console.print(_with_engine(config_path, verbose, _results))


@app.command()
def events(
    config_path: ConfigArg,
    session_id: Annotated[str, typer.Argument(help="Session id")],
    after: Annotated[
        int | None, typer.Option("--after", help="Only events after this sequence number")
    ] = None,
    verbose: VerboseOpt = False,
) -> None:
    """Replay the stored event log of a session."""

    async def _events(engine: JudgingEngine) -> list:
        return await engine.session_events(session_id, after)

    stored = _with_engine(config_path, verbose, _events)
    table = Table(title=f"Events: {session_id}")
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("At", no_wrap=True)
    table.add_column("Data")
    for event in stored:
        table.add_row(
            str(event.sequence),
            event.event_type,
            f"{event.created_at:%H:%M:%S}",
            json.dumps(event.event_data, default=str),
        )
    console.print(table)


@app.command()
def validate(
    config_path: ConfigArg,
    seed_path: Annotated[
        Path | None, typer.Option("--seed", help="Also validate a seed file")
    ] = None,
) -> None:
    """Validate a configuration file (and optionally a seed file)."""
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Database: {config.database_url or config.data_dir}")
        console.print(f"  Result precision: {config.result_precision}")
        console.print(f"  Default question weight: {config.default_question_weight}")
        console.print(f"  Event queue size: {config.event_queue_size}")

        if seed_path is not None:
            data = load_seed(seed_path)
            questions = sum(len(b.questions) for b in data.banks)
            console.print("[green]Seed is valid![/green]")
            console.print(f"  Teams: {len(data.teams)}")
            console.print(f"  Banks: {len(data.banks)}")
            console.print(f"  Questions: {questions}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except JudgingError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
