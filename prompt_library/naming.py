"""Prompt name derivation and name-to-file resolution."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path, PurePath

from .scanner import iter_prompt_files
from .types import NAME_SEPARATOR, PROMPT_EXTENSION

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9\-_]")


def sanitize_name(name: str) -> str:
    """Lowercase ``name`` and replace anything outside ``[a-z0-9-_]`` with ``_``."""

    return _UNSAFE_CHARS.sub("_", name.lower())


def strip_extension(relative_path: str) -> str:
    if relative_path.endswith(PROMPT_EXTENSION):
        return relative_path[: -len(PROMPT_EXTENSION)]
    return relative_path


def canonical_name(relative_path: str | PurePath) -> str:
    """Return the index key for a root-relative document path.

    ``team/review.md`` becomes ``team_review``.
    """

    if isinstance(relative_path, PurePath):
        text = relative_path.as_posix()
    else:
        text = relative_path.replace(os.sep, "/")
    return strip_extension(text).replace("/", NAME_SEPARATOR)


def to_relative(root: Path, path: str | Path) -> str:
    """Express ``path`` relative to ``root`` with POSIX separators."""

    candidate = Path(path)
    if candidate.is_absolute():
        try:
            candidate = candidate.relative_to(root)
        except ValueError:
            candidate = Path(os.path.relpath(candidate, root))
    return candidate.as_posix()


def resolve_prompt_path(root: Path, name: str) -> Path | None:
    """Locate the document for ``name`` under ``root``.

    The sanitized name is tried as a flat file first. Otherwise the tree is
    walked and the first file whose extension-less relative path equals
    ``name`` exactly, or whose sanitized form equals the sanitized name, wins.
    """

    sanitized = sanitize_name(name)
    direct = root / f"{sanitized}{PROMPT_EXTENSION}"
    if direct.is_file():
        return direct

    for path in iter_prompt_files(root):
        stem = strip_extension(path.relative_to(root).as_posix())
        if stem == name:
            return path
        if sanitize_name(stem) == sanitized:
            logger.debug("Resolved %r to %s via sanitized match", name, path)
            return path
    return None


__all__ = ["canonical_name", "resolve_prompt_path", "sanitize_name", "strip_extension", "to_relative"]
