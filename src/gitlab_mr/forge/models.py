"""Merge request, user and approval models as returned by GitLab."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

WIP_MARKER = "WIP:"

# Title prefixes GitLab also treats as marking a draft
DRAFT_PREFIXES = (WIP_MARKER, "Draft:", "[Draft]", "(Draft)")


class User(BaseModel):
    """A GitLab user reference."""

    id: int
    username: str
    name: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.username})" if self.name else self.username


class MergeRequest(BaseModel):
    """Read view of a merge request.

    The forge owns the authoritative copy; this is a snapshot taken
    when it was last fetched or patched.
    """

    iid: int
    id: int | None = None
    title: str
    source_branch: str
    target_branch: str
    description: str | None = ""
    web_url: str = ""
    work_in_progress: bool = False
    assignee: User | None = None
    labels: frozenset[str] = Field(default_factory=frozenset)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> MergeRequest:
        """Build from a GitLab API merge request object.

        Newer GitLab reports ``draft`` instead of ``work_in_progress``;
        either one marks the request as WIP.
        """
        data = dict(payload)
        data["work_in_progress"] = bool(
            payload.get("work_in_progress") or payload.get("draft")
        )
        data["labels"] = frozenset(payload.get("labels") or ())
        if not payload.get("assignee"):
            assignees = payload.get("assignees") or []
            data["assignee"] = assignees[0] if assignees else None
        return cls.model_validate(data)

    @property
    def reference(self) -> str:
        return f"!{self.iid}"


class ApprovalConfig(BaseModel):
    """Approvers configured on a merge request.

    ``approvers`` holds user ids, ``approver_groups`` group ids.
    """

    approvers: frozenset[int] = Field(default_factory=frozenset)
    approver_groups: frozenset[int] = Field(default_factory=frozenset)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> ApprovalConfig:
        return cls(
            approvers=frozenset(
                entry["user"]["id"] for entry in payload.get("approvers") or ()
            ),
            approver_groups=frozenset(
                entry["group"]["id"]
                for entry in payload.get("approver_groups") or ()
            ),
        )


class MergeRequestDraft(BaseModel):
    """Form values for a new merge request, already collected from
    the user."""

    branch: str
    target_branch: str
    title: str
    description: str = ""
    remove_source_branch: bool = False
    squash: bool = False
    assignee_ids: list[int] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    commit_message: str | None = None

    @property
    def effective_commit_message(self) -> str:
        """Message for the commit of pending changes; the title unless
        set explicitly."""
        if self.commit_message is None:
            return self.title
        return self.commit_message
