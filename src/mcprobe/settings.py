"""Probe settings: transport selection, timeouts, and an optional YAML file.

Example ``mcprobe.yaml``::

    transport: fifo
    start_command: node dist/index.js -e .env
    pipe_dir: ${XDG_RUNTIME_DIR}/mcprobe
    response_timeout: 30
    env:
      API_KEY: ${API_KEY}
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from mcprobe.errors import SettingsError


class ProbeSettings(BaseModel):
    """Validated probe configuration.

    ``transport="auto"`` wires a spawned server directly through pipes when
    ``start_command`` is set and falls back to named pipes otherwise.
    """

    transport: Literal["auto", "stdio", "fifo"] = "auto"
    start_command: str | None = None
    pipe_dir: Path = Path(".")
    env: dict[str, str] = {}
    response_timeout: float | None = Field(default=None, gt=0)
    connect_timeout: float | None = Field(default=None, gt=0)
    verbose: bool = False
    telemetry: bool = False
    otlp_endpoint: str | None = None

    @model_validator(mode="after")
    def _check_transport(self) -> ProbeSettings:
        if self.transport == "stdio" and not self.start_command:
            msg = "stdio transport requires 'start_command'"
            raise ValueError(msg)
        return self

    @property
    def resolved_transport(self) -> Literal["stdio", "fifo"]:
        if self.transport == "auto":
            return "stdio" if self.start_command else "fifo"
        return self.transport


def load_settings(path: Path | None = None, **overrides: Any) -> ProbeSettings:
    """Build settings from an optional YAML file plus explicit overrides.

    Environment variables (``$VAR`` / ``${VAR}``) in the file are expanded
    before parsing.  Overrides whose value is ``None`` are ignored so that
    unset command-line options keep the file's values.

    Raises:
        SettingsError: On unreadable files, YAML errors, or invalid values.
    """
    data: dict[str, Any] = {}
    if path is not None:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsError(f"Cannot read {path}: {exc}") from exc

        try:
            loaded: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise SettingsError(f"YAML parse error: {exc}") from exc

        if loaded is not None and not isinstance(loaded, dict):
            raise SettingsError(f"Expected a mapping in {path}, got {type(loaded).__name__}")
        data.update(loaded or {})

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ProbeSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings: {exc}") from exc
