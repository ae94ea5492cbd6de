"""User interaction boundary.

Workflows never talk to the terminal directly. They ask a Prompter for
text, a choice, or to show a message, and treat a None answer as the
user walking away.
"""

from __future__ import annotations

import sys
import webbrowser
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

# Returns an error message, or None when the value is acceptable
Validator = Callable[[str], "str | None"]


@dataclass(frozen=True)
class Choice:
    """One entry of a selection list."""

    label: str
    value: Any = None
    description: str = ""
    detail: str = ""


@dataclass(frozen=True)
class Notification:
    """A terminal message, optionally with follow-up actions."""

    message: str
    level: str = "info"
    actions: tuple[str, ...] = field(default_factory=tuple)


class Prompter(Protocol):
    def ask_text(
        self,
        prompt: str,
        default: str | None = None,
        validate: Validator | None = None,
    ) -> str | None: ...

    def choose(
        self, prompt: str, options: Sequence[Choice]
    ) -> Choice | None: ...

    def status(self, message: str) -> None: ...

    def notify(
        self,
        message: str,
        level: str = "info",
        actions: Sequence[str] = (),
    ) -> str | None: ...

    def open_url(self, url: str) -> None: ...


def message(msg: str) -> str:
    """Prefix shown on every user-facing message."""
    return f"Gitlab MR: {msg}"


class ConsolePrompter:
    """Prompter over stdin/stdout.

    End of input (Ctrl-D) or Ctrl-C at any prompt counts as no answer.
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _read(self, prompt: str) -> str | None:
        self._write(prompt)
        try:
            line = self.stdin.readline()
        except KeyboardInterrupt:
            self._write("\n")
            return None
        if not line:
            return None
        return line.rstrip("\n")

    def ask_text(
        self,
        prompt: str,
        default: str | None = None,
        validate: Validator | None = None,
    ) -> str | None:
        suffix = f" [{default}]" if default else ""
        while True:
            answer = self._read(f"{prompt}{suffix}: ")
            if answer is None:
                return None
            value = answer.strip() or (default or "")
            problem = validate(value) if validate else None
            if problem is None:
                return value
            self._write(f"{problem}\n")

    def choose(
        self, prompt: str, options: Sequence[Choice]
    ) -> Choice | None:
        if not options:
            return None
        self._write(f"{prompt}\n")
        for index, option in enumerate(options, start=1):
            line = f"  {index}) {option.label}"
            if option.description:
                line += f"  [{option.description}]"
            self._write(f"{line}\n")
            if option.detail:
                self._write(f"       {option.detail.splitlines()[0]}\n")

        while True:
            answer = self._read("> ")
            if answer is None or not answer.strip():
                return None
            if answer.strip().isdigit():
                index = int(answer.strip())
                if 1 <= index <= len(options):
                    return options[index - 1]
            self._write(f"Enter a number between 1 and {len(options)}\n")

    def status(self, message: str) -> None:
        self._write(f"{message}\n")

    def notify(
        self,
        message: str,
        level: str = "info",
        actions: Sequence[str] = (),
    ) -> str | None:
        prefix = "Error: " if level == "error" else ""
        self._write(f"{prefix}{message}\n")
        if not actions:
            return None
        selected = self.choose(
            "Select an action (empty to skip)",
            [Choice(label=action, value=action) for action in actions],
        )
        return selected.value if selected else None

    def open_url(self, url: str) -> None:
        self._write(f"{url}\n")
        webbrowser.open(url)
