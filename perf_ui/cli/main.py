"""
Command-line interface for perf-monitor-lib.

Probes the metrics endpoints of running instances and applies load to them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from perf_common.api import configure_logging
from perf_ui.cli.commands.loadrun import create_loadrun_app
from perf_ui.cli.commands.metrics import register_metrics_commands
from perf_ui.wiring import UIContext

ctx_store = UIContext()

app = typer.Typer(
    help="Discover metrics dashboards and run load against monitored instances.",
    no_args_is_help=True,
)


@app.callback(invoke_without_command=True)
def entry(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings file (YAML or JSON); PERF_* environment variables otherwise.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    json_logs: Optional[bool] = typer.Option(
        None, "--json-logs/--console-logs", help="Render logs as JSON lines."
    ),
) -> None:
    """Global entry point configuring logging and settings."""
    configure_logging(debug=debug, json=json_logs, force=True)
    if config is not None:
        ctx_store.config_path = config
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


register_metrics_commands(app, ctx_store)
app.add_typer(create_loadrun_app(ctx_store), name="loadrun")


@app.command("environment")
def environment() -> None:
    """Print the version information of this installation."""
    typer.echo(json.dumps(ctx_store.settings.environment(), indent=2))


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
