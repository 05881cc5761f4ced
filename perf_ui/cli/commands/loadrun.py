from __future__ import annotations

import threading
from typing import Any, List, Optional

import typer
import yaml

from perf_loadrun.api import LoadRunEvent, LoadRunEventName
from perf_ui.wiring import UIContext

EXIT_CODES = {
    LoadRunEventName.COMPLETED: 0,
    LoadRunEventName.ERROR: 1,
    LoadRunEventName.CANCELLED: 130,
}


def parse_option_pairs(pairs: List[str]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into a dict, YAML-typing each value."""
    options: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"Expected key=value, got: {pair}")
        key, raw = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Empty option name in: {pair}")
        options[key] = yaml.safe_load(raw) if raw else ""
    return options


def create_loadrun_app(ctx: UIContext) -> typer.Typer:
    """Build the loadrun Typer app, wired to the given context."""
    app = typer.Typer(help="Apply load to a monitored instance.", no_args_is_help=True)

    @app.command("start")
    def loadrun_start(
        key: str = typer.Argument(..., help="Identifier of the monitored instance."),
        url: str = typer.Argument(..., help="URL to put load on."),
        option: Optional[List[str]] = typer.Option(
            None,
            "--option",
            "-o",
            help="Extra worker option as key=value (repeatable), e.g. -o duration=10.",
        ),
    ) -> None:
        """Run a load worker and follow its lifecycle until it ends."""
        options = parse_option_pairs(option or [])
        options["url"] = url
        orchestrator = ctx.orchestrator
        done = threading.Event()
        outcome: dict[str, LoadRunEvent] = {}

        def _on_event(event: LoadRunEvent) -> None:
            if event.key != key:
                return
            ctx.console.print(f"[bold]{event.name.value}[/bold] {event.key}")
            if event.name.is_terminal:
                outcome["event"] = event
                done.set()

        unsubscribe = orchestrator.bus.subscribe(_on_event)
        try:
            response = orchestrator.start(key, options)
            if not response.accepted:
                ctx.console.print(f"[red]{response.message}[/red]")
                raise typer.Exit(1)
            try:
                done.wait()
            except KeyboardInterrupt:
                orchestrator.cancel(key)
                done.wait()
        finally:
            unsubscribe()

        event = outcome["event"]
        if event.output:
            ctx.console.print(event.output.rstrip())
        if event.error:
            ctx.console.print(f"[red]{event.error.rstrip()}[/red]")
        raise typer.Exit(EXIT_CODES[event.name])

    return app
