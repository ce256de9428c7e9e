"""Read entry point used by the HTTP layer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .cache import PromptCache
from .naming import canonical_name, resolve_prompt_path
from .types import PromptRecord
from .watcher import PromptWatcher

logger = logging.getLogger(__name__)


class PromptNotFoundError(LookupError):
    """Raised when no document matches a requested prompt name."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Prompt "{name}" not found')
        self.name = name


class PromptFileOperations:
    """Serve prompt listings from the cache and prompt bodies from disk."""

    def __init__(
        self,
        prompts_dir: Path,
        cache: PromptCache,
        watcher: PromptWatcher | None = None,
        watch: bool = True,
    ) -> None:
        self._prompts_dir = prompts_dir
        self._cache = cache
        self._watcher = watcher if watcher is not None else PromptWatcher(cache)
        self._watch = watch
        self._ready_lock = asyncio.Lock()

    @property
    def cache(self) -> PromptCache:
        return self._cache

    @property
    def watcher(self) -> PromptWatcher:
        return self._watcher

    async def ensure_ready(self) -> None:
        """Load the index and attach the watcher if the cache is empty.

        An empty prompts directory looks uninitialised, so every call
        rescans it until a prompt appears.
        """

        if not self._cache.is_empty():
            return
        async with self._ready_lock:
            if not self._cache.is_empty():
                return
            await self._cache.bulk_load()
            if self._watch:
                await self._watcher.attach()

    async def list_prompts(self) -> list[PromptRecord]:
        await self.ensure_ready()
        return self._cache.snapshot()

    async def read_prompt(self, name: str) -> str:
        """Return the raw document text for ``name``.

        Resolution goes to disk so prompts not yet indexed can still be read.
        """

        path = await asyncio.to_thread(resolve_prompt_path, self._prompts_dir, name)
        if path is None:
            raise PromptNotFoundError(name)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read prompt %s from %s: %s", name, path, exc)
            raise PromptNotFoundError(name) from exc

    def get_prompt_info(self, name: str) -> PromptRecord | None:
        """Cached record for ``name``; nested names may use their path form."""

        return self._cache.lookup(name) or self._cache.lookup(canonical_name(name))

    async def close(self) -> None:
        await self._watcher.detach()


__all__ = ["PromptFileOperations", "PromptNotFoundError"]
