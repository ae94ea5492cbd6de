"""Tests for merge request edit actions."""

import asyncio

import pytest
from conftest import GitLabApi, mr_payload

from gitlab_mr.core.errors import EmptyTitle
from gitlab_mr.edit.actions import (
    AddApprover,
    EditTitle,
    SetAssignee,
    ToggleWip,
    apply_edit,
    available_actions,
    success_message,
    toggle_wip_title,
)
from gitlab_mr.forge.client import GitLabClient
from gitlab_mr.forge.lifecycle import MrLifecycleClient
from gitlab_mr.forge.models import MergeRequest
from gitlab_mr.git.remote import describe_remote

PROJECT = "/projects/acme%2Fapp"
MR_PATH = f"{PROJECT}/merge_requests/3"


def _lifecycle(api):
    forge = GitLabClient(
        "https://gitlab.com", "secret", transport=api.transport()
    )
    return MrLifecycleClient(forge, describe_remote("git@gitlab.com:acme/app"))


def _mr(**overrides):
    return MergeRequest.from_api(mr_payload(3, **overrides))


def test_action_labels_without_assignee():
    labels = [choice.label for choice in available_actions(_mr())]

    assert labels == [
        "Edit title",
        "Set as WIP",
        "Set assignee",
        "Remove assignee",
        "Add approvers",
    ]


def test_action_labels_with_assignee_and_wip():
    mr = _mr(
        work_in_progress=True,
        assignee={"id": 4, "username": "bo", "name": "Bo"},
    )

    labels = [choice.label for choice in available_actions(mr)]

    assert labels[1] == "Remove WIP"
    assert labels[2] == "Edit assignee (bo)"
    assert labels[3] == "Remove assignee (bo)"


@pytest.mark.parametrize(
    "title,wip,expected",
    [
        ("Fix parser", False, "WIP: Fix parser"),
        ("WIP: Fix parser", True, "Fix parser"),
        ("  WIP:   Fix parser  ", True, "Fix parser"),
        ("Draft: Fix parser", True, "Fix parser"),
        ("[Draft] Fix parser", True, "Fix parser"),
        ("(Draft) Fix parser", True, "Fix parser"),
    ],
)
def test_toggle_wip_title(title, wip, expected):
    assert toggle_wip_title(title, wip) == expected


def test_toggle_wip_twice_restores_title():
    title = "Fix parser"

    once = toggle_wip_title(title, False)
    twice = toggle_wip_title(once, True)

    assert twice == title


def test_edit_title_patches_title_only():
    api = GitLabApi({f"PUT {MR_PATH}": (200, mr_payload(3, title="New"))})

    outcome = asyncio.run(
        apply_edit(_lifecycle(api), _mr(), EditTitle("New"))
    )

    assert outcome.applied
    assert outcome.updated.title == "New"
    assert api.sent("PUT", MR_PATH) == [{"title": "New"}]
    assert success_message(outcome) == "MR !3 title updated."


def test_empty_title_is_rejected_before_any_request():
    api = GitLabApi()

    with pytest.raises(EmptyTitle):
        asyncio.run(apply_edit(_lifecycle(api), _mr(), EditTitle("  ")))
    assert api.requests == []


def test_toggle_wip_on():
    api = GitLabApi({f"PUT {MR_PATH}": (
        200, mr_payload(3, title="WIP: Change 3", work_in_progress=True),
    )})

    outcome = asyncio.run(apply_edit(_lifecycle(api), _mr(), ToggleWip()))

    assert api.sent("PUT", MR_PATH) == [{"title": "WIP: Change 3"}]
    assert success_message(outcome) == "MR !3 WIP added."


def test_toggle_wip_off_strips_gitlab_draft_prefix():
    mr = _mr(title="Draft: feature", draft=True)
    api = GitLabApi({f"PUT {MR_PATH}": (
        200, mr_payload(3, title="feature", draft=False),
    )})

    assert available_actions(mr)[1].label == "Remove WIP"

    outcome = asyncio.run(apply_edit(_lifecycle(api), mr, ToggleWip()))

    assert api.sent("PUT", MR_PATH) == [{"title": "feature"}]
    assert success_message(outcome) == "MR !3 WIP removed."


def test_clear_assignee_sends_null():
    api = GitLabApi({f"PUT {MR_PATH}": (200, mr_payload(3))})

    outcome = asyncio.run(
        apply_edit(_lifecycle(api), _mr(), SetAssignee(None))
    )

    assert api.sent("PUT", MR_PATH) == [{"assignee_id": None}]
    assert success_message(outcome) == "MR !3 assignee removed."


def test_set_assignee():
    api = GitLabApi({f"PUT {MR_PATH}": (200, mr_payload(3))})

    outcome = asyncio.run(
        apply_edit(_lifecycle(api), _mr(), SetAssignee(5, "ann"))
    )

    assert api.sent("PUT", MR_PATH) == [{"assignee_id": 5}]
    assert success_message(outcome) == "MR !3 assignee set to ann"


def test_add_approver_keeps_existing_approvers_and_groups():
    api = GitLabApi({
        f"GET {MR_PATH}/approvals": (200, {
            "approvers": [{"user": {"id": 7}}, {"user": {"id": 9}}],
            "approver_groups": [{"group": {"id": 2}}],
        }),
        f"PUT {MR_PATH}/approvers": (200, {}),
    })

    outcome = asyncio.run(
        apply_edit(_lifecycle(api), _mr(), AddApprover(11))
    )

    assert outcome.applied
    (sent,) = api.sent("PUT", f"{MR_PATH}/approvers")
    assert set(sent["approver_ids"]) == {7, 9, 11}
    assert sent["approver_group_ids"] == [2]


def test_forge_failure_is_reported_verbatim():
    api = GitLabApi({
        f"PUT {MR_PATH}": (403, {"message": "403 Forbidden"}),
    })

    outcome = asyncio.run(
        apply_edit(_lifecycle(api), _mr(), EditTitle("New"))
    )

    assert not outcome.applied
    assert outcome.state == "failed"
    assert outcome.error == "403 Forbidden"
    assert len(api.requests) == 1
