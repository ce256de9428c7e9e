"""Utilities for computing usage metrics from the request log."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any

TOP_PROMPTS_LIMIT = 10


def load_records(log_path: Path) -> list[dict[str, Any]]:
    if not log_path.exists():
        return []
    records: list[dict[str, Any]] = []
    with log_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            content = line.strip()
            if not content:
                continue
            try:
                record = json.loads(content)
            except json.JSONDecodeError:
                continue
            if isinstance(record, dict):
                records.append(record)
    return records


def compute_metrics(log_path: Path, limit: int = TOP_PROMPTS_LIMIT) -> dict[str, Any]:
    """Return aggregate request metrics.

    The returned dictionary contains keys: request_count, not_found_count,
    top_prompts (name -> count, most requested first).
    """

    records = load_records(log_path)
    counter: Counter[str] = Counter()
    not_found = 0
    for record in records:
        if not record.get("found", False):
            not_found += 1
            continue
        name = record.get("name")
        if isinstance(name, str):
            counter[name] += 1

    return {
        "request_count": len(records),
        "not_found_count": not_found,
        "top_prompts": dict(counter.most_common(limit)),
    }


__all__ = ["compute_metrics", "load_records"]
