from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)
ENV_PREFIX = "MPTRACK_"
DEFAULT_API_HOST = "api.mixpanel.com"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _as_optional_float(name: str) -> Optional[float]:
    raw = _env(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s. Ignoring it.", name, raw)
        return None


def _as_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if not raw:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class Settings:
    token: str = ""
    api_key: Optional[str] = None
    api_host: str = DEFAULT_API_HOST
    timeout: Optional[float] = None
    debug: bool = False
    test: bool = False

    @property
    def base_url(self) -> str:
        return f"http://{self.api_host}"


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings(
        token=_env("TOKEN", "") or "",
        api_key=_env("API_KEY") or None,
        api_host=_env("API_HOST") or DEFAULT_API_HOST,
        timeout=_as_optional_float("TIMEOUT"),
        debug=_as_bool("DEBUG", False),
        test=_as_bool("TEST", False),
    )


@dataclass(slots=True)
class ClientConfig:
    """Per-client options.

    ``test`` adds ``test=1`` to every request, ``debug`` logs outgoing
    envelopes and errors, and ``key`` is the API key the import endpoint
    requires. Anything else passed to :meth:`update` lands in ``extra``.

    Debug diagnostics go to the ``mptrack`` loggers at INFO, so they only
    show once logging is configured, e.g. with ``setup_logging()``.
    """

    test: bool = False
    debug: bool = False
    key: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def update(self, options: Mapping[str, Any]) -> None:
        known = {f.name for f in fields(self)} - {"extra"}
        for name, value in options.items():
            if name in known:
                setattr(self, name, value)
            else:
                self.extra[name] = value

    def snapshot(self) -> "ClientConfig":
        return replace(self, extra=dict(self.extra))
