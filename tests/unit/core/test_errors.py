"""Tests for the error hierarchy."""

import pytest

from gitlab_mr.core.errors import (
    BranchEqualsTarget,
    DuplicateMergeRequest,
    EmptyBranchName,
    ForgeConflict,
    ForgeError,
    GitCommandError,
    GitlabMrError,
    InputValidationError,
    MissingAccessToken,
    NoMergeRequestsFound,
    PreconditionError,
    RemoteStateError,
    TransportError,
    UnresolvedConflicts,
    UnsupportedRemoteUrl,
    UserCancelled,
)


@pytest.mark.parametrize(
    "error,family",
    [
        (EmptyBranchName(), InputValidationError),
        (BranchEqualsTarget("master"), InputValidationError),
        (UnresolvedConflicts(["a"]), PreconditionError),
        (MissingAccessToken("https://gitlab.com"), PreconditionError),
        (UnsupportedRemoteUrl("origin", "/srv/git/app.git"), PreconditionError),
        (DuplicateMergeRequest("!1"), RemoteStateError),
        (NoMergeRequestsFound(), RemoteStateError),
        (ForgeConflict("x"), TransportError),
        (GitCommandError("git push", 1, ""), TransportError),
    ],
)
def test_families(error, family):
    assert isinstance(error, family)
    assert isinstance(error, GitlabMrError)


def test_cancellation_is_not_an_error():
    assert not isinstance(UserCancelled(), GitlabMrError)


@pytest.mark.parametrize(
    "text,iid",
    [
        ("Another open merge request already exists: !482", 482),
        ("!12 and !13", 12),
        ("merge request exists", None),
    ],
)
def test_duplicate_iid_extraction(text, iid):
    assert DuplicateMergeRequest(text).mr_iid == iid


def test_forge_conflict_status():
    error = ForgeConflict("exists")

    assert isinstance(error, ForgeError)
    assert error.status_code == 409


def test_git_error_message_falls_back_to_exit_code():
    assert str(GitCommandError("git push", 128, "  ")) == (
        "git push: exit code 128"
    )
