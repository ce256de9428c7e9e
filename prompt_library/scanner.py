"""Recursive discovery of prompt documents under a root directory."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from .types import HIDDEN_PREFIX, PROMPT_EXTENSION, ScanResult, ScanWarning

MAX_SCAN_DEPTH = 32


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def iter_prompt_files(root: Path, warnings: list[ScanWarning] | None = None) -> Iterator[Path]:
    """Yield paths of visible prompt files below ``root``.

    Hidden files and directories are skipped along with their subtree.
    Directories that cannot be listed are recorded in ``warnings`` and
    contribute nothing. Symlinked directories are followed once; a directory
    whose real path was already visited is skipped so link cycles terminate.
    """

    visited: set[str] = set()

    def _walk(directory: Path, depth: int) -> Iterator[Path]:
        if depth > MAX_SCAN_DEPTH:
            if warnings is not None:
                warnings.append(ScanWarning(directory, "maximum scan depth exceeded"))
            return
        real = os.path.realpath(directory)
        if real in visited:
            return
        visited.add(real)

        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            if warnings is not None:
                warnings.append(ScanWarning(directory, str(exc)))
            return

        for entry in entries:
            if is_hidden(entry.name):
                continue
            try:
                if entry.is_dir():
                    yield from _walk(Path(entry.path), depth + 1)
                elif entry.is_file() and entry.name.endswith(PROMPT_EXTENSION):
                    yield Path(entry.path)
            except OSError as exc:
                if warnings is not None:
                    warnings.append(ScanWarning(Path(entry.path), str(exc)))

    yield from _walk(root, 0)


def scan_prompt_files(root: Path) -> ScanResult:
    """Return root-relative paths (POSIX separators) of all prompt files."""

    result = ScanResult()
    for path in iter_prompt_files(root, result.warnings):
        result.paths.append(path.relative_to(root).as_posix())
    return result


__all__ = ["MAX_SCAN_DEPTH", "is_hidden", "iter_prompt_files", "scan_prompt_files"]
