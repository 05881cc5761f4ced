from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from perf_metrics.api import CANDIDATE_ENDPOINTS, ManifestStatus, inspect_manifest
from perf_ui.wiring import UIContext


def register_metrics_commands(app: typer.Typer, ctx: UIContext) -> None:
    """Attach the probe and manifest commands to ``app``."""

    @app.command("probe")
    def probe(
        host: str = typer.Argument(..., help="Host of the running instance."),
        port: int = typer.Argument(..., help="Port the instance listens on."),
        language: Optional[str] = typer.Option(
            None, "--language", "-l", help="Instance language (java, nodejs, swift...)."
        ),
        project_id: Optional[str] = typer.Option(
            None, "--project-id", "-p", help="Project identifier used in dashboard links."
        ),
    ) -> None:
        """Probe the metrics endpoints of an instance and resolve its dashboard."""
        service = ctx.metrics_service
        capabilities = service.capabilities(host, port)

        table = Table(title=f"Metrics endpoints on {host}:{port}")
        table.add_column("Endpoint", style="cyan")
        table.add_column("Hosting")
        table.add_column("Capable", justify="center")
        for endpoint in CANDIDATE_ENDPOINTS:
            capable = capabilities.get(endpoint.path, False)
            table.add_row(
                endpoint.path,
                endpoint.hosting.value,
                "[green]yes[/green]" if capable else "[red]no[/red]",
            )
        ctx.console.print(table)

        if language is None:
            return
        target = service.resolver.resolve(capabilities, language.lower(), project_id)
        if target.available:
            ctx.console.print(
                f"Dashboard ({target.hosting.value}): {target.path}", soft_wrap=True
            )
        else:
            ctx.console.print("[yellow]No dashboard available for this instance.[/yellow]")

    @app.command("manifest")
    def manifest(
        path: Path = typer.Argument(..., help="Project root directory."),
        language: str = typer.Argument(..., help="Project language."),
    ) -> None:
        """Check the build manifest for the metrics dependency."""
        check = inspect_manifest(path, language.lower())
        if check.status is ManifestStatus.UNSUPPORTED_LANGUAGE:
            ctx.console.print(f"[red]Unsupported language: {language}[/red]")
            raise typer.Exit(2)
        if check.status is ManifestStatus.MANIFEST_MISSING:
            ctx.console.print(f"[red]Build manifest not found: {check.manifest}[/red]")
            raise typer.Exit(1)
        if check.has_dependency:
            ctx.console.print(f"[green]Metrics dependency declared in {check.manifest}[/green]")
        else:
            ctx.console.print(f"[yellow]No metrics dependency in {check.manifest}[/yellow]")
