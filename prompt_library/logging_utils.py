"""Logging setup and the JSONL prompt request log."""

from __future__ import annotations

import json
import logging
import platform
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_APPEND_LOCK = threading.Lock()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send diagnostics to stderr at ``level``; safe to call repeatedly."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _build_env_versions() -> dict[str, str]:
    versions: dict[str, str] = {"python": platform.python_version()}
    try:
        import fastapi

        versions["fastapi"] = fastapi.__version__
    except Exception:  # pragma: no cover - optional dependency
        pass
    try:
        import watchdog.version

        versions["watchdog"] = watchdog.version.VERSION_STRING
    except Exception:  # pragma: no cover - optional dependency
        pass
    return versions


ENV_VERSIONS = _build_env_versions()


@dataclass
class JsonlRequestLogger:
    """Append-only JSONL log of prompt fetches."""

    path: Path

    def log(self, name: str, found: bool, argument_keys: Iterable[str] = ()) -> None:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "name": name,
            "found": found,
            "argument_keys": sorted(argument_keys),
            "env_versions": ENV_VERSIONS,
        }
        with _APPEND_LOCK:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False) + "\n")


__all__ = ["JsonlRequestLogger", "configure_logging"]
