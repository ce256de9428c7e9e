from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path

from fastapi.testclient import TestClient


def _load_app(monkeypatch, prompts_dir: Path, log_path: Path):
    monkeypatch.setenv("PROMPTS_DIR", str(prompts_dir))
    monkeypatch.setenv("LOG_PATH", str(log_path))
    monkeypatch.setenv("WATCH_ENABLED", "false")
    monkeypatch.delenv("GITHUB_REPO_URL", raising=False)

    if "prompt_library.app" in sys.modules:
        importlib.invalidate_caches()
        sys.modules.pop("prompt_library.app")

    return importlib.import_module("prompt_library.app")


def test_list_and_get_prompt(tmp_path, monkeypatch, prompts_dir, write_prompt):
    write_prompt(
        prompts_dir,
        "code-review.md",
        "You are an experienced reviewer of {{language}} code.",
        title="Code Review",
        description="Reviews code",
    )
    write_prompt(prompts_dir, "team/review.md", "Team review body without header")
    log_path = tmp_path / "requests.jsonl"
    app_module = _load_app(monkeypatch, prompts_dir, log_path)

    with TestClient(app_module.app) as client:
        response = client.get("/prompts")
        assert response.status_code == 200
        prompts = {item["name"]: item for item in response.json()["prompts"]}
        assert prompts["code-review"] == {
            "name": "code-review",
            "title": "Code Review",
            "description": "Reviews code",
        }
        assert prompts["team_review"]["title"] == "team_review"
        assert prompts["team_review"]["description"] == "Team review body without header..."

        response = client.post("/prompts/code-review", json={"arguments": {"language": "Python"}})
        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "Reviews code"
        assert data["messages"] == [
            {
                "role": "user",
                "content": {"type": "text", "text": "\nYou are an experienced reviewer of Python code."},
            }
        ]

        response = client.get("/prompts/team/review")
        assert response.status_code == 200
        assert response.json()["messages"][0]["content"]["text"] == "Team review body without header"

        response = client.get("/prompts/team/review/raw")
        assert response.status_code == 200
        assert response.text == "Team review body without header"

        response = client.get("/prompts/team/missing")
        assert response.status_code == 404
        assert response.json()["detail"] == 'Prompt "team/missing" not found'

        metrics = client.get("/metrics").json()
        assert metrics["prompt_count"] == 2
        assert metrics["watcher_attached"] is False
        assert metrics["request_count"] == 3
        assert metrics["not_found_count"] == 1
        assert metrics["top_prompts"] == {"code-review": 1, "team/review": 1}

    lines = log_path.read_text(encoding="utf-8").splitlines()
    first = json.loads(lines[0])
    assert first["name"] == "code-review"
    assert first["found"] is True
    assert first["argument_keys"] == ["language"]


def test_invalid_arguments_rejected(tmp_path, monkeypatch, prompts_dir, write_prompt):
    write_prompt(prompts_dir, "simple.md", "Hello {name}")
    app_module = _load_app(monkeypatch, prompts_dir, tmp_path / "requests.jsonl")

    with TestClient(app_module.app) as client:
        response = client.post("/prompts/simple", json={"arguments": ["not", "a", "mapping"]})
        assert response.status_code == 422

        response = client.post("/prompts/simple", json={"arguments": {"name": 42}})
        assert response.status_code == 200
        assert response.json()["messages"][0]["content"]["text"] == "Hello 42"
