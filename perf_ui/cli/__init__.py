from perf_ui.cli.main import app, main

__all__ = ["app", "main"]
