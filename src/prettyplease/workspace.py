import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Sequence

from prettyplease.errors import GitCommandError, WorkspaceError

logger = logging.getLogger("prettyplease")


@dataclass(frozen=True)
class GitResult:
    returncode: int
    stdout: str
    stderr: str


class Workspace:
    """Local working copy of the repository, driven through the git CLI."""

    root: Path
    remote: str

    def __init__(self, root: Path, remote: str = "origin"):
        self.root = Path(root)
        self.remote = remote

    async def git(self, *args: str, check: bool = True) -> GitResult:
        logger.debug("Running git %s", " ".join(args))
        proc = await asyncio.create_subprocess_exec(
            "git",
            "-C",
            str(self.root),
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate()
        result = GitResult(
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
        if check and result.returncode != 0:
            raise GitCommandError(args, result.returncode, result.stderr)
        return result

    async def head_sha(self) -> str:
        return (await self.git("rev-parse", "HEAD")).stdout.strip()

    async def sync(self, head_ref: str, head_sha: str) -> None:
        logger.info("Checking out %s at %s", head_ref, head_sha)
        try:
            await self.git(
                "fetch",
                "--no-tags",
                self.remote,
                f"+refs/heads/{head_ref}:refs/remotes/{self.remote}/{head_ref}",
            )
            await self.git("checkout", "-B", head_ref, f"{self.remote}/{head_ref}")
            current = await self.head_sha()
        except GitCommandError as e:
            raise WorkspaceError(f"Unable to check out {head_ref}: {e}") from e

        if current != head_sha:
            raise WorkspaceError(
                f"Branch {head_ref} is at {current}, expected {head_sha}. "
                "It was updated after the pull request was loaded."
            )

    async def stage(self, paths: Sequence[str]) -> None:
        try:
            await self.git("add", "--", *paths)
        except GitCommandError as e:
            raise WorkspaceError(f"Unable to stage files: {e}") from e

    async def has_staged_changes(self, paths: Sequence[str]) -> bool:
        # --quiet exits 0 without differences and 1 with differences
        result = await self.git(
            "diff", "--cached", "--quiet", "--", *paths, check=False
        )
        if result.returncode == 0:
            return False
        if result.returncode == 1:
            return True
        raise WorkspaceError(
            f"Unable to compare staged files, git diff exited with "
            f"{result.returncode}: {result.stderr.strip()}"
        )

    async def configure_identity(self, name: str, email: str) -> None:
        await self.git("config", "user.name", name)
        await self.git("config", "user.email", email)

    async def commit(self, message: str, paths: Sequence[str]) -> str:
        # --only leaves anything else in the index out of the commit
        await self.git(
            "commit", "--no-verify", "-m", message, "--only", "--", *paths
        )
        return await self.head_sha()

    async def push(self, head_ref: str) -> None:
        logger.info("Pushing to %s/%s", self.remote, head_ref)
        await self.git("push", self.remote, f"HEAD:refs/heads/{head_ref}")
