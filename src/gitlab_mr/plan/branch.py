"""Branch preparation: which git steps run before a merge request opens.

The planner is a pure decision table over RepositoryState; it never
touches the working copy. execute_plan() then runs the steps one after
another, because each one depends on the index and branch pointer the
previous one left behind.
"""

from __future__ import annotations

from enum import Enum

from gitlab_mr.core.errors import (
    BranchEqualsTarget,
    EmptyBranchName,
    EmptyCommitMessage,
    InvalidBranchName,
    UnresolvedConflicts,
    UserCancelled,
)
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import Choice, Prompter
from gitlab_mr.git.status import RepositoryState
from gitlab_mr.git.vcs import VersionControl


class Step(str, Enum):
    CREATE_BRANCH = "create_branch"
    STAGE_ALL = "stage_all"
    COMMIT = "commit"
    PUSH = "push"


BranchPlan = tuple[Step, ...]


def validate_branch_name(desired_branch: str, mr_target_branch: str) -> None:
    """Reject branch names before anything touches git.

    Raises:
        EmptyBranchName: desired_branch is empty
        InvalidBranchName: desired_branch contains whitespace
        BranchEqualsTarget: desired_branch is the merge request target
    """
    if desired_branch == "":
        raise EmptyBranchName()
    if any(ch.isspace() for ch in desired_branch):
        raise InvalidBranchName(desired_branch)
    if desired_branch == mr_target_branch:
        raise BranchEqualsTarget(mr_target_branch)


def plan(
    state: RepositoryState,
    desired_branch: str,
    commit_message: str,
    mr_target_branch: str,
    commit_changes: bool = True,
) -> BranchPlan:
    """Decide the git steps for pushing desired_branch.

    | on basis | clean or commit declined | plan                              |
    |----------|--------------------------|-----------------------------------|
    | yes      | yes                      | create branch, push               |
    | yes      | no                       | create branch, stage, commit, push|
    | no       | yes                      | push                              |
    | no       | no                       | stage, commit, push               |

    Args:
        state: Classified working copy
        desired_branch: Branch the merge request is opened from
        commit_message: Message for the commit, if one is planned
        mr_target_branch: Branch the merge request merges into
        commit_changes: False when the user declined committing

    Raises:
        InputValidationError: For a bad branch name or an empty commit
            message when a commit is planned
        UnresolvedConflicts: The state reports conflicts
    """
    validate_branch_name(desired_branch, mr_target_branch)
    if state.has_conflicts:
        raise UnresolvedConflicts([])

    steps: list[Step] = []
    if state.is_on_target_branch:
        steps.append(Step.CREATE_BRANCH)
    if not state.is_clean and commit_changes:
        if not commit_message or not commit_message.strip():
            raise EmptyCommitMessage()
        steps.extend((Step.STAGE_ALL, Step.COMMIT))
    steps.append(Step.PUSH)
    return tuple(steps)


def should_commit(
    state: RepositoryState, auto_commit: bool, prompter: Prompter
) -> bool:
    """Whether pending changes go into the merge request.

    Only asks when the working copy is dirty and auto-commit is off.

    Raises:
        UserCancelled: The question was dismissed
    """
    if state.is_clean or auto_commit:
        return True

    selected = prompter.choose(
        "Commit current changes?",
        [Choice(label="Yes", value=True), Choice(label="No", value=False)],
    )
    if selected is None:
        raise UserCancelled()
    return bool(selected.value)


async def execute_plan(
    branch_plan: BranchPlan,
    vcs: VersionControl,
    remote: str,
    branch: str,
    commit_message: str,
    on_step=None,
) -> None:
    """Run the plan in order, stopping at the first failure.

    Args:
        branch_plan: Steps from plan()
        vcs: Working copy to act on
        remote: Remote to push to
        branch: Branch to create and push
        commit_message: Message for the commit step
        on_step: Optional callback invoked with each completed step
    """
    for step in branch_plan:
        with logger.span(f"git {step.value}", branch=branch):
            if step is Step.CREATE_BRANCH:
                await vcs.create_branch(branch)
            elif step is Step.STAGE_ALL:
                await vcs.add_all()
            elif step is Step.COMMIT:
                await vcs.commit(commit_message)
            elif step is Step.PUSH:
                await vcs.push(remote, branch)
        if on_step:
            on_step(step)
