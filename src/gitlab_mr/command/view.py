"""View command - open a merge request in the browser."""

from gitlab_mr.command.base import WorkflowCommand, run_graph


class ViewCommand(WorkflowCommand):
    """Select an open merge request and open its web page."""

    async def execute(self, state: "State") -> int:
        from gitlab_mr.workflow.graph import create_view_workflow
        from gitlab_mr.workflow.nodes.view_merge_request import (
            ViewMergeRequest,
        )

        await run_graph(create_view_workflow(), ViewMergeRequest(), state)
        return 0
