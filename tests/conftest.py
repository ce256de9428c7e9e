from __future__ import annotations

from pathlib import Path

import pytest


def _write_prompt(root: Path, relative_path: str, body: str, **attributes: str) -> Path:
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    if attributes:
        header = "\n".join(f"{key}: {value}" for key, value in attributes.items())
        path.write_text(f"---\n{header}\n---\n\n{body}", encoding="utf-8")
    else:
        path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture
def write_prompt():
    return _write_prompt


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    root = tmp_path / "prompts"
    root.mkdir()
    return root
