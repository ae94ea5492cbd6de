"""Checkout command - switch to a merge request's source branch."""

from gitlab_mr.command.base import WorkflowCommand, run_graph


class CheckoutCommand(WorkflowCommand):
    """Select an open merge request and check out its source branch.

    An existing local branch is switched to; otherwise the branch is
    fetched from config.target_remote and tracked.
    """

    async def execute(self, state: "State") -> int:
        from gitlab_mr.workflow.graph import create_checkout_workflow
        from gitlab_mr.workflow.nodes.checkout_merge_request import (
            CheckoutMergeRequest,
        )

        await run_graph(
            create_checkout_workflow(), CheckoutMergeRequest(), state
        )
        return 0
