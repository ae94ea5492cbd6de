"""Open command - push a branch and open a merge request for it."""

from pydantic import ConfigDict, Field

from gitlab_mr.command.base import WorkflowCommand, run_graph
from gitlab_mr.core.log import logger


class OpenCommand(WorkflowCommand):
    """Create a merge request from the current working copy.

    Creates the branch when on the basis branch, commits pending
    changes (asking first unless config.auto_commit_changes is set),
    pushes to config.target_remote and opens the merge request.
    Values not given here are prompted for.
    """

    branch: str | None = Field(
        default=None,
        description="Source branch (default: current branch)",
    )
    target_branch: str | None = Field(
        default=None,
        alias="target-branch",
        description="Branch to merge into (default: config.target_branch)",
    )
    title: str | None = Field(
        default=None,
        description="MR title (default: last commit message)",
    )
    description: str | None = Field(default=None)
    remove_source_branch: bool = Field(
        default=False,
        alias="remove-source-branch",
        description=(
            "Remove the source branch on merge "
            "(also enabled by config.remove_source_branch)"
        ),
    )
    squash: bool = Field(
        default=False,
        description="Squash commits on merge",
    )
    assignee_ids: list[int] = Field(
        default_factory=list,
        alias="assignee-ids",
    )
    labels: list[str] = Field(default_factory=list)
    commit_message: str | None = Field(
        default=None,
        alias="commit-message",
        description="Message for committing pending changes (default: title)",
    )

    model_config = ConfigDict(populate_by_name=True)

    async def execute(self, state: "State") -> int:
        state.runtime.open.request = {
            "branch": self.branch,
            "target_branch": self.target_branch,
            "title": self.title,
            "description": self.description,
            "remove_source_branch": (
                self.remove_source_branch
                or state.config.remove_source_branch
            ),
            "squash": self.squash,
            "assignee_ids": self.assignee_ids,
            "labels": self.labels,
            "commit_message": self.commit_message,
        }

        from gitlab_mr.workflow.graph import create_open_workflow
        from gitlab_mr.workflow.nodes.connect_forge import ConnectForge

        status = await run_graph(create_open_workflow(), ConnectForge(), state)
        logger.info(f"Open workflow finished: {status}")
        return 0 if status == "created" else 1
