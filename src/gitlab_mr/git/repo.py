"""VersionControl implementation over the git executable."""

from __future__ import annotations

import asyncio
import shlex
from pathlib import Path

from gitlab_mr.core.errors import GitCommandError
from gitlab_mr.core.runner import Runner
from gitlab_mr.git.vcs import (
    Remote,
    StatusSummary,
    parse_branches,
    parse_remotes,
    parse_status,
)


class GitRepository:
    """Runs the git command templates from ``config.commands.git``.

    Template placeholders ({branch}, {remote}, {message}, {args}) are
    shell-quoted before substitution. Commands run in a worker thread
    so the event loop is never blocked on git.
    """

    def __init__(
        self,
        workdir: Path,
        commands: dict[str, str],
        timeout: int | None = None,
        runner: Runner | None = None,
    ):
        self.workdir = Path(workdir)
        self.commands = commands
        self.timeout = timeout
        self.runner = runner or Runner()

    def _command(self, name: str, **values) -> str:
        template = self.commands.get(name)
        if not template:
            raise KeyError(f"git command '{name}' not defined in config")
        quoted = {
            key: (
                " ".join(shlex.quote(v) for v in value)
                if isinstance(value, (list, tuple))
                else shlex.quote(value)
            )
            for key, value in values.items()
        }
        return template.format(**quoted)

    def _git(self, name: str, check: bool = True, **values) -> str:
        command = self._command(name, **values)
        result = self.runner.execute(
            command,
            cwd=self.workdir,
            timeout=self.timeout,
            check=False,
        )
        if check and result.exited != 0:
            raise GitCommandError(command, result.exited, result.stderr)
        return result.stdout

    async def _run(self, name: str, check: bool = True, **values) -> str:
        return await asyncio.to_thread(self._git, name, check, **values)

    async def status(self) -> StatusSummary:
        summary = parse_status(await self._run("status"))
        # Fails on a repository without commits; no message then
        summary.last_log_message = (
            await self._run("last_log_message", check=False)
        ).strip()
        return summary

    async def list_branches(self) -> dict[str, str]:
        return parse_branches(await self._run("list_branches"))

    async def create_branch(self, name: str) -> None:
        await self._run("create_branch", branch=name)

    async def checkout_branch(self, args: list[str]) -> None:
        await self._run("checkout", args=list(args))

    async def add_all(self) -> None:
        await self._run("add_all")

    async def commit(self, message: str) -> None:
        await self._run("commit", message=message)

    async def push(self, remote: str, branch: str) -> None:
        await self._run("push", remote=remote, branch=branch)

    async def fetch(self, remote: str, branch: str) -> None:
        await self._run("fetch", remote=remote, branch=branch)

    async def list_remotes(self) -> list[Remote]:
        return parse_remotes(await self._run("list_remotes"))
