"""Configuration helpers for perf_common."""

from .env import parse_bool_env, parse_float_env, parse_int_env, parse_list_env
from .settings import MonitorSettings

__all__ = [
    "MonitorSettings",
    "parse_bool_env",
    "parse_float_env",
    "parse_int_env",
    "parse_list_env",
]
