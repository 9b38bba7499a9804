"""Tests for the docker and git fetch collaborators."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tailview.errors import CommandFailedError, FetchError, ToolUnavailableError
from tailview.fetch import DockerLogFetcher, GitDiffFetcher, run_command


def _proc(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    proc.returncode = returncode
    return proc


class TestRunCommand:
    """Test subprocess output handling."""

    @pytest.mark.anyio
    async def test_returns_decoded_stdout(self) -> None:
        with patch(
            "tailview.fetch.asyncio.create_subprocess_exec",
            AsyncMock(return_value=_proc(b"caf\xc3\xa9 \xff\n")),
        ):
            output = await run_command(["echo"])
        assert output == "café \ufffd\n"

    @pytest.mark.anyio
    async def test_non_zero_exit_raises(self) -> None:
        with patch(
            "tailview.fetch.asyncio.create_subprocess_exec",
            AsyncMock(return_value=_proc(stderr=b"fatal: bad object\n", returncode=128)),
        ):
            with pytest.raises(CommandFailedError) as excinfo:
                await run_command(["git", "show", "nope"])
        assert str(excinfo.value) == "fatal: bad object"
        assert excinfo.value.exit_code == 128


class TestDockerLogFetcher:
    """Test docker logs invocation."""

    @pytest.mark.anyio
    async def test_fetch_runs_docker_logs(self) -> None:
        exec_mock = AsyncMock(return_value=_proc(b"line\n"))
        with patch("tailview.fetch.shutil.which", return_value="/usr/bin/docker"), patch(
            "tailview.fetch.asyncio.create_subprocess_exec", exec_mock
        ):
            logs = await DockerLogFetcher().fetch("web", 100)

        assert logs == "line\n"
        args = exec_mock.call_args.args
        assert args == ("/usr/bin/docker", "logs", "--tail", "100", "--timestamps", "web")

    @pytest.mark.anyio
    async def test_empty_output_is_none(self) -> None:
        with patch("tailview.fetch.shutil.which", return_value="/usr/bin/docker"), patch(
            "tailview.fetch.asyncio.create_subprocess_exec", AsyncMock(return_value=_proc(b""))
        ):
            assert await DockerLogFetcher().fetch("web", 100) is None

    @pytest.mark.anyio
    async def test_missing_docker(self) -> None:
        with patch("tailview.fetch.shutil.which", return_value=None):
            with pytest.raises(ToolUnavailableError):
                await DockerLogFetcher().fetch("web", 100)


class TestGitDiffFetcher:
    """Test git diff invocation."""

    @pytest.mark.anyio
    async def test_missing_directory(self) -> None:
        with pytest.raises(FetchError):
            await GitDiffFetcher().file_diff("/nonexistent/path")

    @pytest.mark.anyio
    async def test_file_diff_against_head(self, tmp_path) -> None:
        exec_mock = AsyncMock(return_value=_proc(b"diff --git a/x b/x\n"))
        with patch("tailview.fetch.shutil.which", return_value="/usr/bin/git"), patch(
            "tailview.fetch.asyncio.create_subprocess_exec", exec_mock
        ):
            diff = await GitDiffFetcher().file_diff(str(tmp_path), "x")

        assert diff.startswith("diff --git")
        args = exec_mock.call_args.args
        assert args == ("/usr/bin/git", "-C", str(tmp_path), "diff", "HEAD", "--no-color", "--", "x")

    @pytest.mark.anyio
    async def test_unborn_head_falls_back(self, tmp_path) -> None:
        exec_mock = AsyncMock(
            side_effect=[
                _proc(stderr=b"fatal: ambiguous argument 'HEAD'", returncode=128),
                _proc(b"diff --git a/x b/x\n"),
            ]
        )
        with patch("tailview.fetch.shutil.which", return_value="/usr/bin/git"), patch(
            "tailview.fetch.asyncio.create_subprocess_exec", exec_mock
        ):
            diff = await GitDiffFetcher().file_diff(str(tmp_path))

        assert diff.startswith("diff --git")
        assert "HEAD" not in exec_mock.call_args.args

    @pytest.mark.anyio
    async def test_staged_diff(self, tmp_path) -> None:
        exec_mock = AsyncMock(return_value=_proc(b""))
        with patch("tailview.fetch.shutil.which", return_value="/usr/bin/git"), patch(
            "tailview.fetch.asyncio.create_subprocess_exec", exec_mock
        ):
            await GitDiffFetcher().file_diff(str(tmp_path), staged=True)

        assert "--cached" in exec_mock.call_args.args

    @pytest.mark.anyio
    async def test_commit_diff(self, tmp_path) -> None:
        exec_mock = AsyncMock(return_value=_proc(b"diff --git a/x b/x\n"))
        with patch("tailview.fetch.shutil.which", return_value="/usr/bin/git"), patch(
            "tailview.fetch.asyncio.create_subprocess_exec", exec_mock
        ):
            await GitDiffFetcher().commit_diff(str(tmp_path), "abc1234")

        args = exec_mock.call_args.args
        assert args[3] == "show"
        assert args[-1] == "abc1234"
