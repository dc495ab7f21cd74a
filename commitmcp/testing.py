#!/usr/bin/env python3

import asyncio
import os
import subprocess
import sys
import tempfile
import unittest
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple, Union
from unittest import mock

from expecttest import TestCase
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from .context import ProjectContext
from .git import GitClient
from .registry import Registry
from .result import ToolResult
from .shell import GitCommandError
from .tools import build_registry

__all__ = [
    "GitRepositoryTestCase",
    "RecordingGit",
]


class RecordingGit(GitClient):
    """A git collaborator that records calls and returns canned output.

    Set ``fail_with`` to a mapping of method name to exception to make
    individual operations fail.
    """

    def __init__(
        self,
        inside_work_tree: bool = True,
        staged: str = "",
        unstaged: str = "",
        untracked: Optional[List[str]] = None,
        commit_stdout: str = "[main abc1234] feat: test\n 1 file changed",
        commit_stderr: str = "",
    ) -> None:
        self.inside_work_tree = inside_work_tree
        self.staged = staged
        self.unstaged = unstaged
        self.untracked = untracked or []
        self.commit_stdout = commit_stdout
        self.commit_stderr = commit_stderr
        self.fail_with: Dict[str, BaseException] = {}
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail_with:
            raise self.fail_with[name]

    async def is_inside_work_tree(self, directory: str) -> bool:
        self._record("is_inside_work_tree", directory)
        return self.inside_work_tree

    async def staged_diff(self, directory: str) -> str:
        self._record("staged_diff", directory)
        return self.staged

    async def unstaged_diff(self, directory: str) -> str:
        self._record("unstaged_diff", directory)
        return self.unstaged

    async def untracked_files(self, directory: str) -> List[str]:
        self._record("untracked_files", directory)
        return list(self.untracked)

    async def stage_all(self, directory: str) -> None:
        self._record("stage_all", directory)

    async def commit(
        self, directory: str, subject: str, body: str = ""
    ) -> subprocess.CompletedProcess[str]:
        self._record("commit", directory, subject, body)
        return subprocess.CompletedProcess[str](
            args=["git", "commit"],
            returncode=0,
            stdout=self.commit_stdout,
            stderr=self.commit_stderr,
        )

    @staticmethod
    def command_error(stdout: str = "", stderr: str = "") -> GitCommandError:
        return GitCommandError(["git", "commit"], 1, stdout, stderr)

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


class GitRepositoryTestCase(TestCase, unittest.IsolatedAsyncioTestCase):
    """Base class for end-to-end tests against a real temporary git repository.

    Tools are called in-process through a registry bound to a fresh
    ProjectContext, unless ``in_process`` is False, in which case they are
    called over stdio on a ``python -m commitmcp`` subprocess.
    """

    in_process: bool = True

    async def asyncSetUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_dir = tempfile.TemporaryDirectory()
        self.testing_time = "1112911993"  # Fixed timestamp for git

        self.env = os.environ.copy()
        # Set environment variables for reproducible git behavior
        self.env.setdefault("GIT_TERMINAL_PROMPT", "0")
        self.env.setdefault("EDITOR", ":")
        self.env.setdefault("GIT_MERGE_AUTOEDIT", "no")
        self.env["LANG"] = "C"
        self.env["LC_ALL"] = "C"
        self.env.setdefault("PAGER", "cat")
        self.env.setdefault("TZ", "UTC")
        self.env.setdefault("TERM", "dumb")
        self.env.setdefault("GIT_AUTHOR_EMAIL", "author@example.com")
        self.env.setdefault("GIT_AUTHOR_NAME", "A U Thor")
        self.env.setdefault("GIT_COMMITTER_EMAIL", "committer@example.com")
        self.env.setdefault("GIT_COMMITTER_NAME", "C O Mitter")
        self.env.setdefault("GIT_COMMITTER_DATE", f"{self.testing_time} -0700")
        self.env.setdefault("GIT_AUTHOR_DATE", f"{self.testing_time} -0700")
        # Keep the server subprocess's logs and config out of $HOME
        self.env["COMMITMCP_CONFIG_DIR"] = self.config_dir.name
        self.env.pop("MCP_COMMIT_PROMPT", None)
        self.env.pop("MCP_CONVENTIONAL_COMMIT_PROMPT", None)
        with open(os.path.join(self.config_dir.name, "commitmcprc"), "w") as f:  # noqa: ASYNC230
            f.write(f'[logger]\npath = "{self.config_dir.name}"\n')

        self.env_patcher = mock.patch(
            "commitmcp.shell.get_subprocess_env", return_value=self.env
        )
        self.env_patcher.start()

        self.context = ProjectContext()
        self.registry: Registry = build_registry(self.context)

        await self.setup_repository()

    async def asyncTearDown(self):
        self.env_patcher.stop()
        self.temp_dir.cleanup()
        self.config_dir.cleanup()

    async def setup_repository(self):
        """Initialize a git repository with one committed file.

        Subclasses can override this to customize the repository.
        """
        try:
            await self.git_run(["init", "-b", "main"])
        except subprocess.CalledProcessError:
            self.fail(
                "git version is too old for tests! Please install a newer version of git."
            )
        await self.git_run(["config", "user.email", "test@example.com"])
        await self.git_run(["config", "user.name", "Test User"])

        readme_path = os.path.join(self.temp_dir.name, "README.md")
        with open(readme_path, "w") as f:  # noqa: ASYNC230
            f.write("# Test Repository\n")

        await self.git_run(["add", "README.md"])
        await self.git_run(["commit", "-m", "chore: initial commit"])

    def write_file(self, name: str, content: str) -> str:
        path = os.path.join(self.temp_dir.name, name)
        with open(path, "w") as f:  # noqa: ASYNC230
            f.write(content)
        return path

    def normalize_path(self, text: str) -> str:
        """Replace the temporary directory path with a fixed placeholder."""
        return text.replace(self.temp_dir.name, "/tmp/test_dir")

    async def call_tool(
        self,
        session: Optional[ClientSession],
        tool_name: str,
        tool_params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[bool, str]:
        """Call a tool and return (is_error, text)."""
        if self.in_process:
            result: ToolResult = await self.registry.dispatch(tool_name, tool_params or {})
            return result.is_error, self.normalize_path(result.text)

        assert session is not None, "Session cannot be None when in_process=False"
        call_result = await session.call_tool(tool_name, tool_params or {})
        texts = [block.text for block in call_result.content if hasattr(block, "text")]
        return bool(call_result.isError), self.normalize_path("\n".join(texts))

    async def call_tool_assert_success(
        self,
        session: Optional[ClientSession],
        tool_name: str,
        tool_params: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Call a tool, assert that it succeeded and return its text."""
        is_error, text = await self.call_tool(session, tool_name, tool_params)
        self.assertFalse(is_error, text)
        return text

    async def call_tool_assert_error(
        self,
        session: Optional[ClientSession],
        tool_name: str,
        tool_params: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Call a tool, assert that it failed and return the error text."""
        is_error, text = await self.call_tool(session, tool_name, tool_params)
        self.assertTrue(is_error, f"Tool call to {tool_name} succeeded, expected to fail: {text}")
        return text

    async def initialize(self, session: Optional[ClientSession] = None) -> str:
        return await self.call_tool_assert_success(
            session, "initialize-project", {"path": self.temp_dir.name}
        )

    @asynccontextmanager
    async def create_client_session(
        self,
    ) -> AsyncGenerator[Optional[ClientSession], None]:
        """Create an MCP client session connected to a commitmcp server."""
        if self.in_process:
            yield None
            return

        server_params = StdioServerParameters(
            command=sys.executable,
            args=["-m", "commitmcp"],
            env=self.env,
        )

        async with stdio_client(server_params) as (read, write):
            async with ClientSession(read, write) as session:
                await session.initialize()
                yield session

    async def git_run(
        self,
        args: List[str],
        check: bool = True,
        capture_output: bool = False,
        text: bool = False,
        **kwargs: Any,
    ) -> Union[subprocess.CompletedProcess[bytes], str]:
        """Run git command asynchronously with appropriate temp_dir and env settings.

        Args:
            args: List of git command arguments (without 'git' prefix)
            check: If True, raises if the command returns a non-zero exit code
            capture_output: If True, captures stdout and stderr
            text: If True, decodes stdout and stderr using the preferred encoding
            **kwargs: Additional keyword arguments to pass to the subprocess

        Returns:
            If capture_output is False: subprocess.CompletedProcess instance
            If capture_output is True and text is True: The stdout content as string

        Example:
            log_output = await self.git_run(["log", "--oneline"], capture_output=True, text=True)
        """
        cmd = ["git"] + args

        kwargs.setdefault("cwd", self.temp_dir.name)
        kwargs.setdefault("env", self.env)

        if capture_output:
            kwargs.setdefault("stdout", subprocess.PIPE)
            kwargs.setdefault("stderr", subprocess.PIPE)

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            **kwargs,
        )

        stdout, stderr = await proc.communicate()

        result = subprocess.CompletedProcess[bytes](
            args=cmd,
            returncode=proc.returncode or 0,
            stdout=stdout,
            stderr=stderr,
        )

        if check and proc.returncode and proc.returncode != 0:
            cmd_str = " ".join(cmd)
            raise subprocess.CalledProcessError(
                proc.returncode, cmd_str, output=stdout, stderr=stderr
            )

        if capture_output and text:
            return stdout.decode().strip() if stdout else ""
        return result
