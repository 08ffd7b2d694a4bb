"""
Runtime settings resolved once at startup.

Precedence is command-line flag, then environment variable, then default:

    RS_COMPACTOR_CONFIG    whitelist config path (counts as explicit)
    RS_COMPACTOR_ENDPOINT  comma separated bridge URLs, probed in order
    RS_COMPACTOR_TIMEOUT   HTTP timeout in seconds
    RS_COMPACTOR_VERBOSE   truthy value enables debug logging
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .config_load import DEFAULT_CONFIG_PATH

DEFAULT_ENDPOINT = "http://127.0.0.1:8085"
DEFAULT_TIMEOUT = 10.0


def _env_flag_truthy(value: Optional[str]) -> bool:
    """Accepted truthy values: '1', 'true', 'yes', 'on' (case insensitive)."""
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _float_or(value, fallback: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


@dataclass
class Settings:
    config_path: Path = DEFAULT_CONFIG_PATH
    config_explicit: bool = False
    endpoints: List[str] = field(default_factory=lambda: [DEFAULT_ENDPOINT])
    snapshot: Optional[Path] = None
    timeout: float = DEFAULT_TIMEOUT
    verbose: bool = False

    @classmethod
    def resolve(
        cls,
        config: Optional[str] = None,
        endpoints: Optional[Sequence[str]] = None,
        snapshot: Optional[str] = None,
        timeout: Optional[float] = None,
        verbose: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        env = os.environ if environ is None else environ

        config_raw = config or env.get("RS_COMPACTOR_CONFIG") or None
        if endpoints:
            urls = list(endpoints)
        else:
            urls = [u.strip() for u in env.get("RS_COMPACTOR_ENDPOINT", "").split(",") if u.strip()]
        if timeout is None:
            timeout = _float_or(env.get("RS_COMPACTOR_TIMEOUT"), DEFAULT_TIMEOUT)

        return cls(
            config_path=Path(config_raw).expanduser() if config_raw else DEFAULT_CONFIG_PATH,
            config_explicit=config_raw is not None,
            endpoints=urls or [DEFAULT_ENDPOINT],
            snapshot=Path(snapshot).expanduser() if snapshot else None,
            timeout=timeout,
            verbose=verbose or _env_flag_truthy(env.get("RS_COMPACTOR_VERBOSE")),
        )
