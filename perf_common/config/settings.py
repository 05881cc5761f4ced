"""Runtime settings for the prober, resolver and load-run orchestrator."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from perf_common.config.env import parse_float_env, parse_int_env, parse_list_env
from perf_common.errors import ConfigurationError

ENV_PREFIX = "PERF_"


def _default_worker_command() -> List[str]:
    return [sys.executable, "-m", "perf_loadrun.worker"]


class MonitorSettings(BaseModel):
    """Process-wide configuration, selected once at start-up."""

    probe_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout for endpoint probes")
    probe_max_workers: Optional[int] = Field(
        default=None, gt=0, description="Probe thread pool size; defaults to one thread per candidate"
    )
    exposition_languages: List[str] = Field(
        default_factory=lambda: ["java"],
        description="Languages for which the standard /metrics exposition may back the dashboard",
    )
    dashboard_mount_prefix: str = Field(default="", description="Prefix prepended to shared-container dashboard paths")
    worker_command: List[str] = Field(
        default_factory=_default_worker_command,
        description="Command used to spawn a load worker; the JSON options are appended",
    )
    app_version: str = Field(default="unknown", description="Version reported by the environment command")
    image_build_time: str = Field(default="unknown", description="Build timestamp reported by the environment command")

    @field_validator("exposition_languages")
    @classmethod
    def _normalize_languages(cls, value: List[str]) -> List[str]:
        return [lang.strip().lower() for lang in value if lang.strip()]

    @field_validator("worker_command")
    @classmethod
    def _require_command(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("worker_command must not be empty")
        return value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MonitorSettings":
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigurationError("Invalid monitor settings", cause=exc) from exc

    @classmethod
    def load(cls, filepath: Path) -> "MonitorSettings":
        """Load settings from a YAML or JSON file (JSON is valid YAML)."""
        try:
            data = yaml.safe_load(Path(filepath).read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Cannot read settings file {filepath}",
                context={"path": filepath},
                cause=exc,
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Settings file must contain a mapping", context={"path": filepath}
            )
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MonitorSettings":
        """Build settings from ``PERF_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        timeout = parse_float_env(env.get(f"{ENV_PREFIX}PROBE_TIMEOUT"))
        if timeout is not None:
            values["probe_timeout_seconds"] = timeout
        workers = parse_int_env(env.get(f"{ENV_PREFIX}PROBE_WORKERS"))
        if workers is not None:
            values["probe_max_workers"] = workers
        languages = parse_list_env(env.get(f"{ENV_PREFIX}EXPOSITION_LANGUAGES"))
        if languages is not None:
            values["exposition_languages"] = languages
        prefix = env.get(f"{ENV_PREFIX}DASHBOARD_PREFIX")
        if prefix is not None:
            values["dashboard_mount_prefix"] = prefix.rstrip("/")
        command = env.get(f"{ENV_PREFIX}WORKER_COMMAND")
        if command:
            values["worker_command"] = command.split()
        version = env.get(f"{ENV_PREFIX}VERSION")
        if version:
            values["app_version"] = version
        build_time = env.get("IMAGE_BUILD_TIME")
        if build_time:
            values["image_build_time"] = build_time
        return cls.from_dict(values)

    def environment(self) -> Dict[str, str]:
        """Return the version payload exposed to operators."""
        return {
            "version": self.app_version,
            "image_build_time": self.image_build_time,
        }
