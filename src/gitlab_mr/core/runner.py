"""Command execution on top of invoke."""

import contextlib
import os
import platform
from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from gitlab_mr.core.log import logger


class Runner(Context):
    """invoke.Context with a single execute() entry point.

    Output is always captured; callers get an invoke.Result and decide
    what a non-zero exit means.
    """

    def kill(self) -> None:
        """Kill the running subprocess.

        invoke's kill() sends signal.SIGKILL, which does not exist on
        Windows. os.kill() there accepts the numeric value and passes it
        on to TerminateProcess().
        """
        if platform.system() == "Windows":
            pid = self.pid if self.using_pty else self.process.pid
            with contextlib.suppress(ProcessLookupError):
                os.kill(pid, 9)
            return

        super().kill()

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Run a shell command and capture its output.

        Args:
            command: Command string to execute
            cwd: Working directory for the command
            timeout: Maximum execution time in seconds
            check: If True, raise on non-zero exit code
            env: Extra environment variables (merged into os.environ)

        Returns:
            invoke.Result with stdout, stderr and exited; a timed out
            command reports exited == -1

        Raises:
            invoke.UnexpectedExit: If check=True and the command fails
        """
        kwargs = {
            "hide": True,
            "warn": not check,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if env:
            kwargs["env"] = env

        logger.debug("Running command", command=command, cwd=str(cwd or ""))
        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(command, **kwargs)
            else:
                result = self.run(command, **kwargs)
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1

        logger.spew(
            "Command finished",
            command=command,
            exited=result.exited,
            stdout=result.stdout,
            stderr=result.stderr,
        )
        return result
