"""Optional population of the prompts directory from a GitHub repository."""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_GITHUB_URL_RE = re.compile(r"github\.com[/:]([^/]+)/([^/]+)")
_SHORT_NAME_RE = re.compile(r"^([^/\s]+)/([^/\s]+)$")


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_url(repo_url: str) -> RepoRef:
    """Accept ``https://github.com/o/r``, ``git@github.com:o/r.git`` or ``o/r``."""

    text = repo_url.strip().rstrip("/")
    match = _GITHUB_URL_RE.search(text) or _SHORT_NAME_RE.match(text)
    if not match:
        raise ValueError(f"Invalid GitHub repository URL format: {repo_url}")
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        raise ValueError(f"Invalid GitHub repository URL format: {repo_url}")
    return RepoRef(owner=owner, repo=repo)


class CommandError(RuntimeError):
    pass


async def _run(*args: str, cwd: Path | None = None) -> str:
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd) if cwd else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        raise CommandError(f"{' '.join(args)} exited with {process.returncode}: {message}")
    return stdout.decode("utf-8", errors="replace") + stderr.decode("utf-8", errors="replace")


class GitHubSync:
    """Clone or update a prompts repository with the ``gh`` and ``git`` CLIs."""

    def __init__(self, prompts_dir: Path, repo_url: str | None, ref: str = "main") -> None:
        self._prompts_dir = prompts_dir
        self._repo_url = repo_url
        self._ref = ref

    def repo_path(self) -> Path:
        assert self._repo_url is not None
        return self._prompts_dir / parse_repo_url(self._repo_url).repo

    async def _cli_ready(self) -> bool:
        if shutil.which("gh") is None:
            logger.warning("GitHub CLI (gh) is not installed. Skipping GitHub sync.")
            return False
        try:
            output = await _run("gh", "auth", "status")
        except (CommandError, OSError):
            output = ""
        if "Logged in" not in output:
            logger.warning('GitHub CLI is not authenticated. Run "gh auth login". Skipping GitHub sync.')
            return False
        return True

    async def _pull(self, repo_path: Path) -> None:
        try:
            await _run("git", "checkout", self._ref, cwd=repo_path)
        except CommandError as exc:
            logger.debug("Checkout of %s skipped: %s", self._ref, exc)
        await _run("git", "pull", cwd=repo_path)
        logger.info("Pulled latest changes from %s", self._repo_url)

    async def _clone(self, repo_path: Path) -> None:
        self._prompts_dir.mkdir(parents=True, exist_ok=True)
        full_name = parse_repo_url(self._repo_url or "").full_name
        await _run("gh", "repo", "clone", full_name, str(repo_path), "--", "--branch", self._ref, "--depth", "1")
        logger.info("Cloned %s into %s", self._repo_url, repo_path)

    async def sync(self) -> bool:
        """Bring the local copy up to date; failures are logged, never raised."""

        if not self._repo_url:
            return False
        try:
            repo_path = self.repo_path()
            if not await self._cli_ready():
                return False
            if (repo_path / ".git").is_dir():
                await self._pull(repo_path)
            else:
                await self._clone(repo_path)
        except (CommandError, OSError, ValueError) as exc:
            logger.error("Error syncing from GitHub: %s", exc)
            return False
        return True


__all__ = ["GitHubSync", "RepoRef", "parse_repo_url"]
