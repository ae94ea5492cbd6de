"""Tests for branch preparation planning and execution."""

import asyncio

import pytest
from conftest import FakePrompter, FakeVcs

from gitlab_mr.core.errors import (
    BranchEqualsTarget,
    EmptyBranchName,
    EmptyCommitMessage,
    GitCommandError,
    InvalidBranchName,
    UnresolvedConflicts,
    UserCancelled,
)
from gitlab_mr.git.status import RepositoryState
from gitlab_mr.plan.branch import Step, execute_plan, plan, should_commit


def _state(on_basis, clean, conflicts=False):
    return RepositoryState(
        current_branch="master" if on_basis else "feature",
        is_on_target_branch=on_basis,
        is_clean=clean,
        has_conflicts=conflicts,
    )


@pytest.mark.parametrize(
    "on_basis,clean,expected",
    [
        (True, True, (Step.CREATE_BRANCH, Step.PUSH)),
        (
            True,
            False,
            (Step.CREATE_BRANCH, Step.STAGE_ALL, Step.COMMIT, Step.PUSH),
        ),
        (False, True, (Step.PUSH,)),
        (False, False, (Step.STAGE_ALL, Step.COMMIT, Step.PUSH)),
    ],
)
def test_decision_table(on_basis, clean, expected):
    steps = plan(_state(on_basis, clean), "feature", "Fix it", "master")

    assert steps == expected
    assert steps[-1] is Step.PUSH


def test_declined_commit_plans_like_clean_copy():
    steps = plan(
        _state(True, False), "feature", "", "master", commit_changes=False
    )

    assert steps == (Step.CREATE_BRANCH, Step.PUSH)


@pytest.mark.parametrize(
    "branch,error",
    [
        ("", EmptyBranchName),
        ("a b", InvalidBranchName),
        ("tab\tbranch", InvalidBranchName),
        ("master", BranchEqualsTarget),
    ],
)
def test_invalid_branch_names(branch, error):
    with pytest.raises(error):
        plan(_state(True, True), branch, "Fix it", "master")


def test_branch_is_compared_with_mr_target_not_basis():
    """A branch named like the basis branch may target another branch."""
    steps = plan(_state(True, True), "master", "msg", "release")

    assert steps == (Step.CREATE_BRANCH, Step.PUSH)


def test_conflicted_state_is_rejected():
    with pytest.raises(UnresolvedConflicts):
        plan(_state(False, False, conflicts=True), "feature", "x", "master")


@pytest.mark.parametrize("message", ["", "   "])
def test_commit_requires_message(message):
    with pytest.raises(EmptyCommitMessage):
        plan(_state(False, False), "feature", message, "master")


def test_empty_message_is_fine_without_commit():
    assert plan(_state(False, True), "feature", "", "master") == (Step.PUSH,)


def test_should_commit_skips_prompt_when_clean():
    prompter = FakePrompter()

    assert should_commit(_state(True, True), False, prompter) is True
    assert prompter.offered == []


def test_should_commit_skips_prompt_with_auto_commit():
    prompter = FakePrompter()

    assert should_commit(_state(True, False), True, prompter) is True
    assert prompter.offered == []


def test_should_commit_asks():
    prompter = FakePrompter(choices=["No"])

    assert should_commit(_state(True, False), False, prompter) is False
    assert prompter.offered == [("Commit current changes?", ["Yes", "No"])]


def test_dismissed_commit_question_cancels():
    with pytest.raises(UserCancelled):
        should_commit(_state(True, False), False, FakePrompter())


def test_execute_plan_runs_steps_in_order():
    vcs = FakeVcs()
    done = []

    asyncio.run(execute_plan(
        (Step.CREATE_BRANCH, Step.STAGE_ALL, Step.COMMIT, Step.PUSH),
        vcs,
        remote="origin",
        branch="feature",
        commit_message="Fix it",
        on_step=done.append,
    ))

    assert vcs.calls == [
        ("create_branch", "feature"),
        ("add_all",),
        ("commit", "Fix it"),
        ("push", "origin", "feature"),
    ]
    assert done == [Step.CREATE_BRANCH, Step.STAGE_ALL, Step.COMMIT, Step.PUSH]


def test_execute_plan_stops_at_first_failure():
    vcs = FakeVcs(fail_on="commit")

    with pytest.raises(GitCommandError):
        asyncio.run(execute_plan(
            (Step.STAGE_ALL, Step.COMMIT, Step.PUSH),
            vcs,
            remote="origin",
            branch="feature",
            commit_message="Fix it",
        ))

    assert vcs.names == ["add_all", "commit"]
