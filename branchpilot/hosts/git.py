"""Branch host backed by a local git repository."""

import asyncio
import logging
from pathlib import Path

from branchpilot.errors import GitCommandError
from branchpilot.hosts.base import BranchHost, RefUpdate
from branchpilot.naming import strip_refs_heads

logger = logging.getLogger(__name__)


class LocalGitHost(BranchHost):
    def __init__(self, git_dir: Path = Path(".")) -> None:
        self._git_dir = git_dir
        self._branches: list[str] | None = None

    async def _run(self, *args: str) -> tuple[int, str, str]:
        cmd = ["git", *args]
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=self._git_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(cmd, 127, "git not found on PATH") from exc
        stdout, stderr = await process.communicate()
        return (
            process.returncode or 0,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def list_branches(self) -> list[str]:
        if self._branches is not None:
            return self._branches

        args = ("for-each-ref", "--format=%(refname)", "refs/heads/")
        returncode, stdout, stderr = await self._run(*args)
        if returncode != 0:
            raise GitCommandError(["git", *args], returncode, stderr)

        self._branches = [strip_refs_heads(line.strip()) for line in stdout.splitlines() if line.strip()]
        logger.debug("Loaded %d branches from %s", len(self._branches), self._git_dir)
        return self._branches

    async def branch_exists(self, name: str) -> bool:
        # Hosted refs compare case-insensitively
        wanted = name.lower()
        return any(branch.lower() == wanted for branch in await self.list_branches())

    async def create_branch(self, name: str, source: str) -> RefUpdate:
        returncode, _, stderr = await self._run("branch", "--no-track", name, strip_refs_heads(source))
        if returncode != 0:
            return RefUpdate(success=False, message=stderr.strip())
        return RefUpdate(success=True)

    def invalidate(self) -> None:
        self._branches = None
