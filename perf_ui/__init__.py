"""Command-line surface for perf-monitor-lib."""
