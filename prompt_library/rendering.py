"""Argument substitution for prompt bodies."""

from __future__ import annotations

import re
from collections.abc import Mapping


def render_arguments(text: str, arguments: Mapping[str, str] | None) -> str:
    """Replace ``{{key}}`` and then ``{key}`` placeholders with argument values."""

    if not arguments:
        return text
    for key, value in arguments.items():
        escaped = re.escape(key)
        replacement = str(value)
        text = re.sub(r"\{\{" + escaped + r"\}\}", lambda _match: replacement, text)
        text = re.sub(r"\{" + escaped + r"\}", lambda _match: replacement, text)
    return text


__all__ = ["render_arguments"]
