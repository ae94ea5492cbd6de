"""Merge request lifecycle on top of a ForgeClient."""

from __future__ import annotations

from urllib.parse import urlencode

from gitlab_mr.core.errors import (
    DuplicateMergeRequest,
    ForgeConflict,
    NoMergeRequestsFound,
)
from gitlab_mr.core.log import logger
from gitlab_mr.forge.client import ForgeClient
from gitlab_mr.forge.models import ApprovalConfig, MergeRequest, User
from gitlab_mr.git.remote import RemoteDescriptor


class MrLifecycleClient:
    """Create, list and edit merge requests of one project.

    Nothing here retries. A failed call surfaces as the forge error;
    the caller decides what to offer the user instead.
    """

    def __init__(self, forge: ForgeClient, remote: RemoteDescriptor):
        self.forge = forge
        self.remote = remote

    @property
    def project_url(self) -> str:
        return f"{self.remote.web_url}/{self.remote.project_path}"

    async def create(
        self,
        branch: str,
        target_branch: str,
        title: str,
        description: str = "",
        remove_source_branch: bool = False,
        squash: bool = False,
        assignee_ids: list[int] | None = None,
        labels: list[str] | None = None,
    ) -> MergeRequest:
        """Open a merge request from branch into target_branch.

        Raises:
            DuplicateMergeRequest: An open MR already exists for the
                branch; its iid is on the exception when the forge
                named it.
            ForgeError: Any other forge failure.
        """
        fields = {
            "source_branch": branch,
            "target_branch": target_branch,
            "title": title,
            "description": description,
            "remove_source_branch": remove_source_branch,
            "squash": squash,
        }
        if assignee_ids:
            fields["assignee_ids"] = list(assignee_ids)
        if labels:
            fields["labels"] = ",".join(labels)

        try:
            payload = await self.forge.create_merge_request(
                self.remote.repo_id, fields
            )
        except ForgeConflict as e:
            duplicate = DuplicateMergeRequest(e.message)
            logger.warn(
                "Merge request already exists",
                branch=branch,
                existing_iid=duplicate.mr_iid,
            )
            raise duplicate from e

        mr = MergeRequest.from_api(payload)
        logger.info(f"Created merge request {mr.reference}", url=mr.web_url)
        return mr

    async def list(self, state: str = "opened") -> list[MergeRequest]:
        """Merge requests of the project in the forge's order.

        Raises:
            NoMergeRequestsFound: The forge returned none.
        """
        payload = await self.forge.list_merge_requests(
            self.remote.repo_id, state=state
        )
        if not payload:
            raise NoMergeRequestsFound()
        return [MergeRequest.from_api(item) for item in payload]

    async def edit(self, iid: int, **fields) -> MergeRequest:
        """Patch the given fields of merge request iid."""
        logger.debug(f"Updating merge request !{iid}", fields=fields)
        payload = await self.forge.update_merge_request(
            self.remote.repo_id, iid, fields
        )
        return MergeRequest.from_api(payload)

    async def search_users(self, query: str) -> list[User]:
        payload = await self.forge.search_users(query)
        return [User.model_validate(item) for item in payload]

    async def get_approval_config(self, iid: int) -> ApprovalConfig:
        payload = await self.forge.get_approvals(self.remote.repo_id, iid)
        return ApprovalConfig.from_api(payload or {})

    async def update_approvers(
        self,
        iid: int,
        approver_ids: list[int],
        approver_group_ids: list[int],
    ) -> None:
        await self.forge.update_approvers(
            self.remote.repo_id, iid, approver_ids, approver_group_ids
        )

    async def list_labels(self) -> set[str]:
        payload = await self.forge.list_labels(self.remote.repo_id)
        return {item["name"] for item in payload}

    def build_create_url(self, branch: str, target_branch: str) -> str:
        """Web form for creating the merge request by hand."""
        query = urlencode({
            "merge_request[source_branch]": branch,
            "merge_request[target_branch]": target_branch,
        })
        return f"{self.project_url}/merge_requests/new?{query}"

    def build_existing_mr_url(self, mr_id: int | str) -> str:
        """Web page of an existing merge request."""
        return f"{self.project_url}/merge_requests/{mr_id}"

    def build_mr_url(self, mr: MergeRequest, edit: bool = False) -> str:
        url = mr.web_url or self.build_existing_mr_url(mr.iid)
        return f"{url}/edit" if edit else url
