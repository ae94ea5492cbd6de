"""Edit command - apply one edit to an open merge request."""

from gitlab_mr.command.base import WorkflowCommand, run_graph


class EditCommand(WorkflowCommand):
    """Edit the title, WIP marker, assignee or approvers of an open
    merge request."""

    async def execute(self, state: "State") -> int:
        from gitlab_mr.workflow.graph import create_edit_workflow
        from gitlab_mr.workflow.nodes.select_merge_request import (
            SelectMergeRequest,
        )

        status = await run_graph(
            create_edit_workflow(), SelectMergeRequest(), state
        )
        return 0 if status == "applied" else 1
