"""Docker and git collaborators that produce raw log and diff text."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import structlog

from tailview.errors import CommandFailedError, FetchError, ToolUnavailableError
from tailview.settings import settings

logger = structlog.get_logger(__name__)


def _require_binary(name: str) -> str:
    binary = shutil.which(name)
    if not binary:
        raise ToolUnavailableError(f"{name} executable not found")
    return binary


async def run_command(
    args: list[str],
    *,
    cwd: str | None = None,
    merge_stderr: bool = False,
    timeout: float | None = None,
) -> str:
    """Run *args* and return stdout decoded lossily as UTF-8.

    Raises:
        CommandFailedError: On a non-zero exit code or timeout.
    """
    timeout_s = timeout if timeout is not None else settings.fetch_timeout_seconds()
    logger.debug("Running command", args=args, cwd=cwd)
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT if merge_stderr else asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise CommandFailedError(f"{Path(args[0]).name} timed out after {timeout_s:g}s")
    output = (stdout or b"").decode("utf-8", errors="replace")
    if proc.returncode != 0:
        error_text = (stderr or b"").decode("utf-8", errors="replace").strip()
        if merge_stderr:
            error_text = output.strip()
        message = error_text or f"exit code {proc.returncode}"
        raise CommandFailedError(message, exit_code=proc.returncode, stderr=error_text)
    return output


class DockerLogFetcher:
    """Fetch the combined stdout/stderr tail of a container."""

    def __init__(self, docker_bin: str | None = None) -> None:
        self._docker_bin = docker_bin or settings.docker_bin()

    async def fetch(self, container_id: str, tail: int) -> str | None:
        """Return the last *tail* log lines of *container_id*, or None if empty."""
        docker = _require_binary(self._docker_bin)
        output = await run_command(
            [docker, "logs", "--tail", str(tail), "--timestamps", container_id],
            merge_stderr=True,
        )
        return output or None

    async def __call__(self, target: str, tail: int) -> str | None:
        return await self.fetch(target, tail)


class GitDiffFetcher:
    """Run ``git diff`` / ``git show`` inside a repository."""

    def __init__(self, git_bin: str | None = None) -> None:
        self._git_bin = git_bin or settings.git_bin()

    def _prepare(self, repo: str) -> str:
        if not Path(repo).is_dir():
            raise FetchError(f"Directory not found: {repo}")
        return _require_binary(self._git_bin)

    async def file_diff(self, repo: str, path: str | None = None, staged: bool = False) -> str:
        """Return the working tree (or staged) diff, optionally for one path."""
        git = self._prepare(repo)
        suffix = ["--", path] if path else []
        if staged:
            return await run_command(
                [git, "-C", repo, "diff", "--cached", "--no-color", *suffix]
            )
        try:
            return await run_command([git, "-C", repo, "diff", "HEAD", "--no-color", *suffix])
        except CommandFailedError as exc:
            stderr = exc.stderr.lower()
            if "unknown revision or path" in stderr or "ambiguous argument" in stderr:
                # Unborn HEAD: fall back to index vs working tree.
                logger.info("git diff HEAD failed; retrying without HEAD", repo=repo)
                return await run_command([git, "-C", repo, "diff", "--no-color", *suffix])
            raise

    async def commit_diff(self, repo: str, commit: str) -> str:
        """Return the patch introduced by *commit*."""
        git = self._prepare(repo)
        return await run_command(
            [git, "-C", repo, "show", "--no-color", "--pretty=format:", commit]
        )
