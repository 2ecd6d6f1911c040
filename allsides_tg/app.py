"""Typer CLI entrypoint for allsides-tg."""

from __future__ import annotations

import signal
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import AppConfig, ConfigRepository
from .engine import DedupStore, Fetcher, TelegramNotifier
from .errors import AllSidesError
from .logging_conf import app_log_path, configure_logging, tail_log
from .orchestrator import CycleSummary, Orchestrator
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="Publish AllSides balanced-news stories to a Telegram channel.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class CliOptions:
    config_path: Path | None
    verbose: bool
    state: "AppState | None" = None


@dataclass
class AppState:
    config: AppConfig
    repository: ConfigRepository
    orchestrator: Orchestrator
    scheduler: APSchedulerAdapter
    store: DedupStore
    fetcher: Fetcher
    notifier: TelegramNotifier

    def close(self) -> None:
        self.fetcher.close()
        self.notifier.close()
        self.store.close()


def build_state(config_path: Path | None, verbose: bool) -> AppState:
    repository = ConfigRepository()
    config = repository.load(config_path)
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    store = DedupStore.open(repository.story_db_path(config))
    fetcher = Fetcher(config.fetcher)
    notifier = TelegramNotifier(config.telegram)
    orchestrator = Orchestrator(config=config, fetcher=fetcher, notifier=notifier, store=store)
    return AppState(
        config=config,
        repository=repository,
        orchestrator=orchestrator,
        scheduler=APSchedulerAdapter(),
        store=store,
        fetcher=fetcher,
        notifier=notifier,
    )


def _get_state(ctx: typer.Context) -> AppState:
    options: CliOptions = ctx.obj
    if options.state is None:
        try:
            options.state = build_state(options.config_path, options.verbose)
        except (ValidationError, ValueError, FileNotFoundError) as exc:
            console.print(f"Invalid configuration: {exc}", style="red", markup=False)
            raise typer.Exit(code=2) from exc
        except AllSidesError as exc:
            console.print(str(exc), style="red", markup=False)
            raise typer.Exit(code=1) from exc
    return options.state


def _render_summary(summary: CycleSummary) -> Table:
    table = Table(title="Cycle summary", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Published", str(summary.published))
    table.add_row("Skipped", str(summary.skipped))
    table.add_row("Failed", str(summary.failed))
    table.add_row("Aborted", "yes" if summary.aborted else "no")
    if summary.error:
        table.add_row("Error", summary.error)
    return table


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a YAML/JSON configuration file."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    ctx.obj = CliOptions(config_path=config, verbose=verbose)


@app.command("run", help="Poll the balanced-news page forever, publishing new stories.")
def run(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    stop_event = Event()

    def _stop(signum, _frame) -> None:  # noqa: ANN001
        console.print(f"Received signal {signum}, stopping…", style="yellow")
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)
    console.print(
        f"Polling {state.config.main_page_url} every {state.config.update_interval} min.",
        style="cyan",
    )
    try:
        state.orchestrator.run_forever(state.scheduler, stop_event)
    finally:
        state.close()


@app.command("tick", help="Run a single poll cycle and exit.")
def tick(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        summary = state.orchestrator.run_cycle()
    finally:
        state.close()
    console.print(_render_summary(summary))
    if summary.aborted:
        raise typer.Exit(code=1)


@app.command("preview", help="Print the announcement for a story URL without publishing it.")
def preview(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Story page URL."),
) -> None:
    state = _get_state(ctx)
    try:
        body = state.orchestrator.preview(url)
    except AllSidesError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc
    finally:
        state.close()
    console.print(body, markup=False, highlight=False)


@app.command("history", help="Show recently published story URLs.")
def history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", help="Number of records to show."),
) -> None:
    state = _get_state(ctx)
    try:
        rows = state.store.recent(limit)
    except AllSidesError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc
    finally:
        state.close()
    if not rows:
        console.print("No stories published yet.", style="dim")
        return
    table = Table(title=f"Last {len(rows)} published stories", box=box.SIMPLE_HEAD)
    table.add_column("Published at", style="green")
    table.add_column("URL", overflow="fold")
    for url, ts in rows:
        table.add_row(str(ts), str(url))
    console.print(table)


@app.command("logs", help="Show the tail of the application log.")
def logs(
    lines: int = typer.Option(100, "--lines", help="Number of trailing lines."),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Log directory override."),
) -> None:
    content = tail_log(app_log_path(log_dir), lines)
    if not content:
        console.print("No log entries yet.", style="dim")
        return
    console.print("".join(content), markup=False, highlight=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
