"""Classifiers for the metrics formats an application may expose.

Both checks are pure and deterministic for a given body. Neither validates
the format fully: they only tell the prober whether a response looks like
something the dashboards know how to read.
"""

from __future__ import annotations

import re

# Script reference embedded in every *metrics-dash HTML page. Matching it is a
# sniff of the page, not a validation of the dashboard.
LEGACY_DASHBOARD_MARKER = 'src="graphmetrics/js'

# First "{" up to the first "}" on the line. Braces inside label values are
# not balanced; such lines may be misclassified.
_LABEL_BLOCK = re.compile(r"\{.*?\}")


def is_legacy_dashboard_format(body: str) -> bool:
    """Return True when ``body`` references the legacy dashboard scripts."""
    return LEGACY_DASHBOARD_MARKER in body


def _is_exposition_line(line: str) -> bool:
    if line.startswith("#"):
        return True
    if not line.strip():
        return False
    sample = _LABEL_BLOCK.sub("", line, count=1)
    # "name value" or "name{labels} value": one space outside the label block
    return sample.count(" ") == 1


def is_exposition_format(body: str) -> bool:
    """Return True when every line of ``body`` fits the text exposition format.

    Comment lines (``#``) are accepted as-is. Any other line must hold exactly
    one space once its label block is stripped. An empty body is accepted.
    """
    lines = body.split("\n")
    if lines[-1] == "":
        lines.pop()
    return all(_is_exposition_line(line) for line in lines)


def is_recognized_format(body: str) -> bool:
    """Return True when either known format matches ``body``."""
    return is_legacy_dashboard_format(body) or is_exposition_format(body)
