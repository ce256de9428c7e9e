from __future__ import annotations

from pathlib import Path

from prompt_library.config import ENV_FILE_VARIABLE, load_config

_KEYS = ("PROMPTS_DIR", "GITHUB_REPO_URL", "GITHUB_REPO_REF", "LOG_LEVEL", "WATCH_ENABLED", ENV_FILE_VARIABLE)


def _clear_env(monkeypatch) -> None:
    # setenv first so the values the .env file fills in are removed again on undo
    for key in _KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_env_file_in_working_directory_fills_unset_values(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    (tmp_path / ".env").write_text(
        "# local settings\n"
        f"export PROMPTS_DIR={tmp_path / 'library'}\n"
        'GITHUB_REPO_URL="https://github.com/acme/prompts"\n'
        "LOG_LEVEL=debug\n"
        "WATCH_ENABLED=off\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.prompts_dir == (tmp_path / "library").resolve()
    assert config.github_repo_url == "https://github.com/acme/prompts"
    assert config.github_repo_ref == "main"
    assert config.log_level == "DEBUG"
    assert config.watch_enabled is False


def test_environment_wins_over_env_file(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    (tmp_path / ".env").write_text("LOG_LEVEL=debug\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", "warning")

    assert load_config().log_level == "WARNING"


def test_env_file_location_can_be_overridden(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    settings = tmp_path / "settings" / "prompts.env"
    settings.parent.mkdir()
    settings.write_text("GITHUB_REPO_REF='release'\n", encoding="utf-8")
    (tmp_path / ".env").write_text("GITHUB_REPO_REF=ignored\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(ENV_FILE_VARIABLE, str(settings))

    assert load_config().github_repo_ref == "release"


def test_defaults_without_env_file(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.prompts_dir == Path("~/.prompt-library/prompts").expanduser().resolve()
    assert config.github_repo_url is None
    assert config.watch_enabled is True
