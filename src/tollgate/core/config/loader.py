"""Settings for declared clients: optional YAML file, then ``TOLLGATE_*`` env overrides."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

_ENV_PREFIX = "TOLLGATE_"


class ClientSettings(BaseModel):
    timeout_s: float = Field(15.0, ge=0.1)
    connect_timeout_s: float = Field(5.0, ge=0.1)
    user_agent: str = "tollgate/1.0"
    token_prefix: str = ""
    cookies_enabled: bool = False
    breakers_enabled: bool = True
    breaker_failure_threshold: int = Field(3, ge=1)
    breaker_open_seconds: int = Field(60, ge=1)
    breaker_half_open_max_trials: int = Field(1, ge=1)
    breaker_max_workers: int = Field(10, ge=1)
    breaker_timeout_s: float = Field(30.0, ge=0.1)
    log_level: str = "INFO"
    http_log_level: str | None = None
    log_to_file: bool = False
    log_dir: str | None = None
    log_max_bytes: int = Field(5_000_000, ge=1024)
    log_backup_count: int = Field(5, ge=0)


_MINIMUMS: dict[str, float] = {
    "timeout_s": 0.1,
    "connect_timeout_s": 0.1,
    "breaker_failure_threshold": 1,
    "breaker_open_seconds": 1,
    "breaker_half_open_max_trials": 1,
    "breaker_max_workers": 1,
    "breaker_timeout_s": 0.1,
    "log_max_bytes": 1024,
    "log_backup_count": 0,
}


def _coerce(raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        return raw.strip().casefold() in {"on", "true", "1", "yes"}
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return default
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError:
            return default
    return raw


def _env_overrides(base: ClientSettings) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in ClientSettings.model_fields:
        raw = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        value = _coerce(raw, getattr(base, name))
        if name in _MINIMUMS:
            value = max(type(value)(_MINIMUMS[name]), value)
        overrides[name] = value
    return overrides


def load_settings(path: Optional[str] = None) -> ClientSettings:
    data: dict[str, Any] = {}
    if path:
        with Path(path).open("r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        data = dict(loaded.get("client", loaded)) if isinstance(loaded, dict) else {}
    base = ClientSettings.model_validate(data)
    overrides = _env_overrides(base)
    if not overrides:
        return base
    return ClientSettings.model_validate({**base.model_dump(), **overrides})
