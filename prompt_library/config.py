"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PROMPTS_DIR = "~/.prompt-library/prompts"
ENV_FILE_VARIABLE = "PROMPT_LIBRARY_ENV_FILE"


def _env_file_path() -> Path:
    override = os.getenv(ENV_FILE_VARIABLE)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / ".env"


def _read_env_file(env_path: Path) -> dict[str, str]:
    """Parse ``KEY=value`` lines; an ``export`` prefix and matching quotes are dropped."""

    values: dict[str, str] = {}
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[key.strip()] = value
    return values


def _ensure_env_loaded() -> None:
    """Fill unset variables from the working directory's ``.env`` file."""

    env_path = _env_file_path()
    if not env_path.is_file():
        return
    for key, value in _read_env_file(env_path).items():
        os.environ.setdefault(key, value)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def _optional(value: str | None) -> str | None:
    if value is None or value.strip() == "":
        return None
    return value.strip()


@dataclass
class AppConfig:
    """Runtime configuration sourced from environment variables."""

    prompts_dir: Path
    github_repo_url: str | None = None
    github_repo_ref: str = "main"
    log_path: Path = field(default_factory=lambda: Path("logs/prompt_requests.jsonl"))
    log_level: str = "INFO"
    watch_enabled: bool = True


def load_config() -> AppConfig:
    """Return the active application configuration."""

    _ensure_env_loaded()
    prompts_dir = Path(os.getenv("PROMPTS_DIR") or DEFAULT_PROMPTS_DIR).expanduser().resolve()
    github_repo_url = _optional(os.getenv("GITHUB_REPO_URL"))
    github_repo_ref = _optional(os.getenv("GITHUB_REPO_REF")) or "main"
    log_path = Path(os.getenv("LOG_PATH", "logs/prompt_requests.jsonl"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    watch_enabled = _parse_bool(os.getenv("WATCH_ENABLED"), True)

    return AppConfig(
        prompts_dir=prompts_dir,
        github_repo_url=github_repo_url,
        github_repo_ref=github_repo_ref,
        log_path=log_path,
        log_level=log_level,
        watch_enabled=watch_enabled,
    )
