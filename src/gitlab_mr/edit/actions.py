"""Edit actions on an existing merge request.

An edit run moves through Selected(mr) → ActionChosen(mr, action) →
Applied | Failed. This module holds the actions and how each one
turns into a single forge update; workflow/nodes/edit.py drives the
transitions.
"""

from __future__ import annotations

from dataclasses import dataclass

from gitlab_mr.core.errors import EmptyTitle, ForgeError
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import Choice
from gitlab_mr.forge.lifecycle import MrLifecycleClient
from gitlab_mr.forge.models import DRAFT_PREFIXES, WIP_MARKER, MergeRequest


@dataclass(frozen=True)
class EditTitle:
    new_title: str


@dataclass(frozen=True)
class ToggleWip:
    pass


@dataclass(frozen=True)
class SetAssignee:
    """Assign a user, or clear the assignee with None."""

    user_id: int | None
    username: str | None = None


@dataclass(frozen=True)
class AddApprover:
    user_id: int
    username: str | None = None


EditAction = EditTitle | ToggleWip | SetAssignee | AddApprover

# Action kinds offered in the selection list
EDIT_TITLE = "edit_title"
TOGGLE_WIP = "toggle_wip"
EDIT_ASSIGNEE = "edit_assignee"
REMOVE_ASSIGNEE = "remove_assignee"
ADD_APPROVERS = "add_approvers"


@dataclass(frozen=True)
class EditOutcome:
    """Result of applying one action.

    ``updated`` is the merge request as the forge returned it, when the
    action patched the merge request itself. ``error`` carries the
    forge's message verbatim when the action failed.
    """

    mr: MergeRequest
    action: EditAction
    applied: bool
    updated: MergeRequest | None = None
    error: str | None = None

    @property
    def state(self) -> str:
        return "applied" if self.applied else "failed"


def available_actions(mr: MergeRequest) -> list[Choice]:
    """Actions offered for mr, labelled from its current state."""
    assignee = mr.assignee.username if mr.assignee else None
    return [
        Choice(label="Edit title", value=EDIT_TITLE),
        Choice(
            label="Remove WIP" if mr.work_in_progress else "Set as WIP",
            value=TOGGLE_WIP,
        ),
        Choice(
            label=(
                f"Edit assignee ({assignee})" if assignee else "Set assignee"
            ),
            value=EDIT_ASSIGNEE,
        ),
        Choice(
            label=(
                f"Remove assignee ({assignee})" if assignee
                else "Remove assignee"
            ),
            value=REMOVE_ASSIGNEE,
        ),
        Choice(label="Add approvers", value=ADD_APPROVERS),
    ]


def toggle_wip_title(title: str, work_in_progress: bool) -> str:
    """Add or strip the WIP marker.

    Stripping removes the leading marker and the whitespace around the
    rest of the title. A request GitLab reports as a draft may carry
    its own prefix (Draft:, [Draft], (Draft)) instead of WIP:; that
    prefix is removed too. Adding prepends the marker and one space.
    """
    if work_in_progress:
        stripped = title.strip()
        for prefix in DRAFT_PREFIXES:
            if stripped.startswith(prefix):
                stripped = stripped[len(prefix):]
                break
        return stripped.strip()
    return f"{WIP_MARKER} {title}"


def success_message(outcome: EditOutcome) -> str:
    mr, action = outcome.mr, outcome.action
    if isinstance(action, EditTitle):
        return f"MR {mr.reference} title updated."
    if isinstance(action, ToggleWip):
        now_wip = (
            outcome.updated.work_in_progress if outcome.updated
            else not mr.work_in_progress
        )
        return f"MR {mr.reference} WIP {'added' if now_wip else 'removed'}."
    if isinstance(action, SetAssignee):
        if action.user_id is None:
            return f"MR {mr.reference} assignee removed."
        who = action.username or action.user_id
        return f"MR {mr.reference} assignee set to {who}"
    return f"MR {mr.reference} approver added."


async def apply_edit(
    lifecycle: MrLifecycleClient, mr: MergeRequest, action: EditAction
) -> EditOutcome:
    """Apply exactly one action to mr.

    Forge failures end in a failed outcome carrying the forge's
    message; nothing is retried.

    Raises:
        EmptyTitle: EditTitle with a blank title
    """
    if isinstance(action, EditTitle) and not action.new_title.strip():
        raise EmptyTitle()

    try:
        updated = await _apply(lifecycle, mr, action)
    except ForgeError as e:
        logger.error(
            f"Editing MR {mr.reference} failed",
            action=type(action).__name__,
            status=e.status_code,
            error=e.message,
        )
        return EditOutcome(mr=mr, action=action, applied=False, error=e.message)

    return EditOutcome(mr=mr, action=action, applied=True, updated=updated)


async def _apply(
    lifecycle: MrLifecycleClient, mr: MergeRequest, action: EditAction
) -> MergeRequest | None:
    if isinstance(action, EditTitle):
        return await lifecycle.edit(mr.iid, title=action.new_title)

    if isinstance(action, ToggleWip):
        title = toggle_wip_title(mr.title, mr.work_in_progress)
        return await lifecycle.edit(mr.iid, title=title)

    if isinstance(action, SetAssignee):
        return await lifecycle.edit(mr.iid, assignee_id=action.user_id)

    if isinstance(action, AddApprover):
        approvals = await lifecycle.get_approval_config(mr.iid)
        # Append-only: existing approvers and groups are resubmitted
        approver_ids = sorted(approvals.approvers | {action.user_id})
        await lifecycle.update_approvers(
            mr.iid,
            approver_ids=approver_ids,
            approver_group_ids=sorted(approvals.approver_groups),
        )
        return None

    raise TypeError(f"Unknown edit action: {action!r}")
