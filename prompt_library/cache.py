"""In-memory index of prompt records kept in sync with the prompts directory."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .naming import canonical_name, to_relative
from .prompt_loader import PromptLoader
from .scanner import iter_prompt_files
from .types import NAME_SEPARATOR, PROMPT_EXTENSION, ChangeKind, PromptRecord, WatchEvent

logger = logging.getLogger(__name__)


class PromptCache:
    """Owns the name -> record mapping for one prompts directory.

    Mutations are serialised with an ``asyncio.Lock``. Bulk loads build a new
    mapping and swap it in with a single assignment, so readers see either
    the previous index or the new one.
    """

    def __init__(self, prompts_dir: Path, loader: PromptLoader | None = None) -> None:
        self._prompts_dir = prompts_dir
        self._loader = loader or PromptLoader(prompts_dir)
        self._records: dict[str, PromptRecord] = {}
        self._lock = asyncio.Lock()

    @property
    def prompts_dir(self) -> Path:
        return self._prompts_dir

    def snapshot(self) -> list[PromptRecord]:
        return list(self._records.values())

    def lookup(self, name: str) -> PromptRecord | None:
        return self._records.get(name)

    def is_empty(self) -> bool:
        return not self._records

    def size(self) -> int:
        return len(self._records)

    async def bulk_load(self) -> int:
        """Rebuild the index from disk and return the number of records."""

        async with self._lock:
            try:
                await asyncio.to_thread(self._prompts_dir.mkdir, parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("Failed to create prompts directory %s: %s", self._prompts_dir, exc)
            scan = await asyncio.to_thread(self._loader.scan)
            for warning in scan.warnings:
                logger.warning("Skipped %s while scanning prompts: %s", warning.path, warning.message)

            loaded = await asyncio.gather(
                *(asyncio.to_thread(self._loader.load, path) for path in scan.paths)
            )
            records: dict[str, PromptRecord] = {}
            for record in loaded:
                if record is not None:
                    records[record.name] = record
            self._records = records

        logger.info("Loaded %d prompts into cache", len(records))
        return len(records)

    async def upsert_from_path(self, path: str | Path) -> PromptRecord | None:
        """Reload one document and store its record under its canonical name."""

        relative_path = to_relative(self._prompts_dir, path)
        if not relative_path.endswith(PROMPT_EXTENSION):
            logger.debug("Ignoring non-prompt path %s", relative_path)
            return None

        async with self._lock:
            record = await asyncio.to_thread(self._loader.load, relative_path)
            if record is not None:
                self._records[record.name] = record
        return record

    async def remove_from_path(self, path: str | Path) -> bool:
        """Drop the record for ``path``; the file itself may already be gone."""

        relative_path = to_relative(self._prompts_dir, path)
        if not relative_path.endswith(PROMPT_EXTENSION):
            return False

        async with self._lock:
            return self._records.pop(canonical_name(relative_path), None) is not None

    async def add_tree(self, path: str | Path) -> int:
        """Index every visible prompt below a directory that appeared in the tree."""

        directory = self._prompts_dir / to_relative(self._prompts_dir, path)
        async with self._lock:
            found = await asyncio.to_thread(lambda: list(iter_prompt_files(directory)))
            loaded = await asyncio.gather(
                *(asyncio.to_thread(self._loader.load, file_path) for file_path in found)
            )
            for record in loaded:
                if record is not None:
                    self._records[record.name] = record
        return sum(record is not None for record in loaded)

    async def remove_tree(self, path: str | Path) -> int:
        """Drop every record that lived below a directory that left the tree.

        Names are matched by their flattened directory prefix. A surviving
        file elsewhere whose name collides with a dropped one is reloaded.
        """

        relative_path = to_relative(self._prompts_dir, path)
        async with self._lock:
            if relative_path in ("", "."):
                removed = set(self._records)
            else:
                prefix = canonical_name(relative_path) + NAME_SEPARATOR
                removed = {name for name in self._records if name.startswith(prefix)}
            for name in removed:
                del self._records[name]

            if removed and relative_path not in ("", "."):
                scan = await asyncio.to_thread(self._loader.scan)
                survivors = [p for p in scan.paths if canonical_name(p) in removed]
                for survivor in survivors:
                    record = await asyncio.to_thread(self._loader.load, survivor)
                    if record is not None:
                        self._records[record.name] = record
                        removed.discard(record.name)
        return len(removed)

    async def apply(self, event: WatchEvent) -> None:
        if event.kind is ChangeKind.DELETED:
            await self.remove_from_path(event.path)
        elif event.kind is ChangeKind.TREE_DELETED:
            await self.remove_tree(event.path)
        elif event.kind is ChangeKind.TREE_CREATED:
            await self.add_tree(event.path)
        else:
            await self.upsert_from_path(event.path)


__all__ = ["PromptCache"]
