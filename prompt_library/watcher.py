"""Filesystem watcher that feeds prompt changes into the cache."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .cache import PromptCache
from .scanner import is_hidden
from .types import PROMPT_EXTENSION, ChangeKind, WatchEvent

logger = logging.getLogger(__name__)

OBSERVER_JOIN_TIMEOUT = 5.0


class PromptEventHandler(FileSystemEventHandler):
    """Translate watchdog events for visible prompts and directories into ``WatchEvent``s.

    Runs on the observer thread; it only hands events to ``emit`` and never
    touches the cache directly.
    """

    def __init__(self, root: Path, emit: Callable[[WatchEvent], None]) -> None:
        super().__init__()
        self._root = root
        self._emit = emit

    def _is_visible(self, raw_path: str | bytes) -> bool:
        path = Path(os.fsdecode(raw_path))
        try:
            parts = path.relative_to(self._root).parts
        except ValueError:
            return False
        return not any(is_hidden(part) for part in parts)

    def _is_prompt(self, raw_path: str | bytes) -> bool:
        path = Path(os.fsdecode(raw_path))
        if not path.name.endswith(PROMPT_EXTENSION) or is_hidden(path.name):
            return False
        try:
            parts = path.relative_to(self._root).parts
        except ValueError:
            return True
        return not any(is_hidden(part) for part in parts)

    def _forward(self, kind: ChangeKind, raw_path: str | bytes) -> None:
        try:
            self._emit(WatchEvent(kind=kind, path=os.fsdecode(raw_path)))
        except Exception:
            logger.exception("File watcher error while forwarding %s", raw_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_prompt(event.src_path):
            self._forward(ChangeKind.CREATED, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_prompt(event.src_path):
            self._forward(ChangeKind.MODIFIED, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            if self._is_visible(event.src_path):
                self._forward(ChangeKind.TREE_DELETED, event.src_path)
        elif self._is_prompt(event.src_path):
            self._forward(ChangeKind.DELETED, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            if self._is_visible(event.src_path):
                self._forward(ChangeKind.TREE_DELETED, event.src_path)
            if self._is_visible(event.dest_path):
                self._forward(ChangeKind.TREE_CREATED, event.dest_path)
            return
        if self._is_prompt(event.src_path):
            self._forward(ChangeKind.DELETED, event.src_path)
        if self._is_prompt(event.dest_path) and self._is_visible(event.dest_path):
            self._forward(ChangeKind.CREATED, event.dest_path)


class PromptWatcher:
    """Watches the prompts directory and applies changes to a ``PromptCache``.

    Events cross from the observer thread to the event loop through an
    ``asyncio.Queue``; one consumer task applies them in arrival order.
    """

    def __init__(
        self,
        cache: PromptCache,
        observer_factory: Callable[[], Observer] = Observer,
    ) -> None:
        self._cache = cache
        self._observer_factory = observer_factory
        self._observer: Observer | None = None
        self._queue: asyncio.Queue[WatchEvent] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._consumer: asyncio.Task[None] | None = None

    @property
    def is_attached(self) -> bool:
        return self._observer is not None

    def handler(self) -> PromptEventHandler:
        return PromptEventHandler(self._cache.prompts_dir, self._enqueue)

    async def attach(self) -> bool:
        """Start watching; a second call while attached does nothing."""

        if self.is_attached:
            return True

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._consumer = self._loop.create_task(self._consume())

        observer = self._observer_factory()
        try:
            observer.schedule(self.handler(), str(self._cache.prompts_dir), recursive=True)
            observer.start()
        except OSError as exc:
            logger.error("File watcher failed to start for %s: %s", self._cache.prompts_dir, exc)
            self._consumer.cancel()
            self._consumer = None
            return False

        self._observer = observer
        logger.info("File watcher initialized for prompts directory (recursive): %s", self._cache.prompts_dir)
        return True

    async def detach(self) -> None:
        """Stop the observer and release its OS resources."""

        observer = self._observer
        self._observer = None
        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join, OBSERVER_JOIN_TIMEOUT)
            logger.info("File watcher stopped")
        await self.drain()
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
        self._queue = None
        self._loop = None

    async def drain(self) -> None:
        """Wait until every queued event has been applied."""

        queue = self._queue
        if queue is None or self._consumer is None or self._consumer.done():
            return
        # let put_nowait callbacks scheduled from the observer thread run first
        await asyncio.sleep(0)
        await queue.join()

    def _enqueue(self, event: WatchEvent) -> None:
        loop, queue = self._loop, self._queue
        if loop is None or queue is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            queue.put_nowait(event)
        else:
            loop.call_soon_threadsafe(queue.put_nowait, event)

    async def _consume(self) -> None:
        assert self._queue is not None
        queue = self._queue
        while True:
            event = await queue.get()
            try:
                logger.info("Prompt %s: %s", event.kind.value, event.path)
                await self._cache.apply(event)
            except Exception:
                logger.exception("File watcher error while applying %s", event)
            finally:
                queue.task_done()


__all__ = ["PromptEventHandler", "PromptWatcher"]
