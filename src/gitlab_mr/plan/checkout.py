"""Checkout of a merge request's source branch."""

from __future__ import annotations

from dataclasses import dataclass

from gitlab_mr.forge.models import MergeRequest
from gitlab_mr.git.vcs import VersionControl


@dataclass(frozen=True)
class SwitchTo:
    branch: str


@dataclass(frozen=True)
class FetchThenTrack:
    """Fetch one branch and create a local branch tracking it."""

    remote: str
    branch: str

    @property
    def upstream(self) -> str:
        return f"{self.remote}/{self.branch}"


CheckoutStep = SwitchTo | FetchThenTrack


def plan(
    mr: MergeRequest, known_local_branches: dict[str, str] | set[str],
    remote_name: str,
) -> CheckoutStep:
    """Switch to the source branch if it exists locally, else track it."""
    if mr.source_branch in known_local_branches:
        return SwitchTo(mr.source_branch)
    return FetchThenTrack(remote_name, mr.source_branch)


async def execute(step: CheckoutStep, vcs: VersionControl) -> None:
    if isinstance(step, SwitchTo):
        await vcs.checkout_branch([step.branch])
        return
    await vcs.fetch(step.remote, step.branch)
    await vcs.checkout_branch(["-b", step.branch, step.upstream])
