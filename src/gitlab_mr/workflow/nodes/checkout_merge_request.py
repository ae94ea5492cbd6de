"""CheckoutMergeRequest node - switch the working copy to an MR's
source branch."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import message
from gitlab_mr.plan import checkout
from gitlab_mr.workflow.session import select_merge_request


@dataclass
class CheckoutMergeRequest(BaseNode[State, None, str]):
    """Check out the source branch of the selected merge request.

    A branch that already exists locally is switched to; otherwise it is
    fetched from config.target_remote and tracked.
    """

    async def run(self, ctx: GraphRunContext[State]) -> End[str]:
        checkout_state = ctx.state.runtime.checkout
        session = ctx.state.runtime.session

        mr = await select_merge_request(ctx.state)
        checkout_state.merge_request = mr

        session.prompter.status(message(f"Checking out MR {mr.reference}..."))
        branches = await session.vcs.list_branches()
        step = checkout.plan(mr, branches, ctx.state.config.target_remote)
        checkout_state.step = step
        logger.debug(
            f"Checkout step for {mr.reference}",
            step=type(step).__name__,
            branch=mr.source_branch,
        )

        await checkout.execute(step, session.vcs)
        checkout_state.status = "switched"

        session.prompter.notify(message(f"Switched to MR {mr.reference}."))
        logger.info(f"Switched to {mr.source_branch}")
        return End(mr.source_branch)
