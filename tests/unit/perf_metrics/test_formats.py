"""Tests for the metrics format classifiers."""

from __future__ import annotations

import pytest

from perf_metrics.formats import (
    is_exposition_format,
    is_legacy_dashboard_format,
    is_recognized_format,
)


pytestmark = pytest.mark.unit_metrics


@pytest.mark.parametrize(
    "body",
    [
        'foo_total 12\nbar{label="x"} 3\n',
        "# HELP http_requests_total Total requests\n# TYPE http_requests_total counter\n"
        'http_requests_total{method="POST",handler="/messages"} 1027\n',
        "process_cpu_seconds_total 0.42",
        "",
        "# only comments here, with many spaces\n",
    ],
)
def test_exposition_format_accepts_valid_bodies(body: str) -> None:
    assert is_exposition_format(body) is True


@pytest.mark.parametrize(
    "body",
    [
        "foo bar baz\n",
        'foo_total 12\nbar{label="x"} 3 1700000000\n',
        "<html><body>Not a metrics page</body></html>",
        "foo_total\n",
        "foo_total 12\n\nbar 3\n",
        "   \n",
    ],
)
def test_exposition_format_rejects_invalid_bodies(body: str) -> None:
    assert is_exposition_format(body) is False


def test_label_block_may_contain_spaces() -> None:
    assert is_exposition_format('api_requests{method="POST", handler="/x y"} 5\n')


def test_only_first_label_block_is_stripped() -> None:
    # The second block keeps its inner space, so the line has two spaces.
    assert is_exposition_format('a{x="1"}{y="2 3"} 4\n') is False


def test_literal_brace_in_label_value_is_not_balanced() -> None:
    # Stripping ends at the first "}", leaving ' b"} 1' with two spaces.
    assert is_exposition_format('metric{label="a} b"} 1\n') is False


def test_legacy_marker_is_found_anywhere() -> None:
    page = '<html><head><script src="graphmetrics/js/main.js"></script></head></html>'
    assert is_legacy_dashboard_format(page) is True
    assert is_legacy_dashboard_format('src="graphmetrics/js"') is True
    assert is_legacy_dashboard_format("<script src='graphmetrics/js'>") is False
    assert is_legacy_dashboard_format("") is False


def test_recognized_format_matches_either_classifier() -> None:
    assert is_recognized_format('<script src="graphmetrics/js/x.js">  </script>')
    assert is_recognized_format("up 1\n")
    assert not is_recognized_format("<html> <body> </body> </html>")
