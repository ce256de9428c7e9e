"""Shared dataclasses and type aliases for the prompt library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

PROMPT_EXTENSION = ".md"
HIDDEN_PREFIX = "."
NAME_SEPARATOR = "_"


@dataclass
class PromptRecord:
    """Indexed view of a single prompt document."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    preview: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "attributes": dict(self.attributes), "preview": self.preview}


@dataclass
class ParsedDocument:
    """Front matter attributes and body text of a markdown document."""

    attributes: dict[str, Any]
    body: str


@dataclass
class ScanWarning:
    """A subtree that could not be enumerated during a scan."""

    path: Path
    message: str


@dataclass
class ScanResult:
    """Relative document paths found by a scan, plus skipped subtrees."""

    paths: list[str] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)


class ChangeKind(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    TREE_CREATED = "tree_created"
    TREE_DELETED = "tree_deleted"


@dataclass(frozen=True)
class WatchEvent:
    """A filesystem change forwarded from the watcher to the cache."""

    kind: ChangeKind
    path: str
