"""VersionControl interface and git output parsing."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field

# Porcelain v1 XY codes for unmerged paths
CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


class StatusSummary(BaseModel):
    """Working copy status, bucketed the way the planners need it."""

    current: str | None = None
    conflicted: list[str] = Field(default_factory=list)
    created: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    not_added: list[str] = Field(default_factory=list)
    renamed: list[str] = Field(default_factory=list)
    last_log_message: str = ""


class Remote(BaseModel):
    name: str
    push_url: str


class VersionControl(Protocol):
    """Git operations used by the workflows.

    Every call is awaited to completion before the next is issued.
    """

    async def status(self) -> StatusSummary: ...

    async def list_branches(self) -> dict[str, str]: ...

    async def create_branch(self, name: str) -> None: ...

    async def checkout_branch(self, args: list[str]) -> None: ...

    async def add_all(self) -> None: ...

    async def commit(self, message: str) -> None: ...

    async def push(self, remote: str, branch: str) -> None: ...

    async def fetch(self, remote: str, branch: str) -> None: ...

    async def list_remotes(self) -> list[Remote]: ...


def parse_status(porcelain: str) -> StatusSummary:
    """Parse ``git status --porcelain=v1 --branch`` output."""
    summary = StatusSummary()
    for line in porcelain.splitlines():
        if not line.strip():
            continue
        if line.startswith("## "):
            summary.current = _parse_branch_header(line[3:])
            continue

        code, path = line[:2], line[3:]
        index, worktree = code[0], code[1]

        if code in CONFLICT_CODES:
            summary.conflicted.append(path)
            continue
        if code == "??":
            summary.not_added.append(path)
            continue
        if index == "R":
            summary.renamed.append(path)
        if index == "A":
            summary.created.append(path)
        if "D" in (index, worktree):
            summary.deleted.append(path)
        if "M" in (index, worktree):
            summary.modified.append(path)
    return summary


def _parse_branch_header(header: str) -> str | None:
    # "main...origin/main [ahead 1]", "No commits yet on main",
    # "HEAD (no branch)"
    for prefix in ("No commits yet on ", "Initial commit on "):
        if header.startswith(prefix):
            return header[len(prefix):].strip()
    if header.startswith("HEAD (no branch)"):
        return "HEAD"
    return header.split("...")[0].split(" ")[0] or None


def parse_branches(output: str) -> dict[str, str]:
    """Parse ``git branch --format='%(refname:short) %(objectname)'``."""
    branches = {}
    for line in output.splitlines():
        name, _, ref = line.strip().partition(" ")
        if name:
            branches[name] = ref
    return branches


def parse_remotes(output: str) -> list[Remote]:
    """Parse ``git remote -v``, keeping push URLs in listing order."""
    remotes: dict[str, str] = {}
    for line in output.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        name, url = fields[0], fields[1]
        kind = fields[2] if len(fields) > 2 else "(push)"
        if kind == "(push)" or name not in remotes:
            remotes[name] = url
    return [Remote(name=name, push_url=url) for name, url in remotes.items()]
