"""YAML front matter parsing for prompt documents."""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

import yaml

from .types import ParsedDocument

logger = logging.getLogger(__name__)

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): _normalize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item) for item in value]
    return value


def parse_front_matter(content: bytes | str) -> ParsedDocument:
    """Split ``content`` into front matter attributes and body.

    Never raises for malformed input: a missing, unterminated or invalid
    header yields empty attributes and the whole text as body.
    """

    if isinstance(content, bytes):
        text = content.decode("utf-8", errors="replace")
    else:
        text = content
    if text.startswith("\ufeff"):
        text = text[1:]

    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return ParsedDocument(attributes={}, body=text)

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.debug("Ignoring malformed front matter: %s", exc)
        return ParsedDocument(attributes={}, body=text)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ParsedDocument(attributes={}, body=text)

    body = text[match.end() :]
    return ParsedDocument(attributes=_normalize_value(data), body=body)


__all__ = ["parse_front_matter"]
