"""Utilities for loading prompt markdown files into index records."""

from __future__ import annotations

import logging
from pathlib import Path

from .frontmatter import parse_front_matter
from .naming import canonical_name, to_relative
from .scanner import scan_prompt_files
from .types import PromptRecord, ScanResult

PREVIEW_LENGTH = 100
PREVIEW_SUFFIX = "..."

logger = logging.getLogger(__name__)


def build_preview(body: str, length: int = PREVIEW_LENGTH) -> str:
    """Collapse newlines in the leading ``length`` characters of ``body``."""

    return body[:length].replace("\r", "").replace("\n", " ").strip() + PREVIEW_SUFFIX


class PromptLoader:
    """Loads prompt records from the prompts directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def scan(self) -> ScanResult:
        """Return every visible prompt path below the root."""

        return scan_prompt_files(self._root)

    def load(self, path: str | Path) -> PromptRecord | None:
        """Parse one document; ``None`` if it cannot be read."""

        relative_path = to_relative(self._root, path)
        file_path = self._root / relative_path
        try:
            content = file_path.read_bytes()
        except OSError as exc:
            logger.warning("Failed to load prompt metadata for %s: %s", relative_path, exc)
            return None

        parsed = parse_front_matter(content)
        return PromptRecord(
            name=canonical_name(relative_path),
            attributes=parsed.attributes,
            preview=build_preview(parsed.body),
        )


__all__ = ["PREVIEW_LENGTH", "PromptLoader", "build_preview"]
