"""ExecutePlan node - run the planned git steps."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.core.errors import GitCommandError
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import message
from gitlab_mr.plan.branch import execute_plan
from gitlab_mr.workflow.nodes.create_merge_request import offer_manual_create


@dataclass
class ExecutePlan(BaseNode[State, None, str]):
    """Create, commit and push the branch, one step at a time."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "CreateMergeRequest | End[str]":
        """Run the plan; stop at the first git failure.

        Returns:
            CreateMergeRequest: Every step succeeded
            End[str]: "failed" after a git step failed
        """
        open_state = ctx.state.runtime.open
        session = ctx.state.runtime.session
        draft = open_state.draft

        session.prompter.status(message(
            f"Building MR to {draft.target_branch} from {draft.branch}..."
        ))

        def completed(step):
            open_state.steps_completed += 1

        try:
            await execute_plan(
                open_state.plan,
                session.vcs,
                remote=ctx.state.config.target_remote,
                branch=draft.branch,
                commit_message=draft.effective_commit_message,
                on_step=completed,
            )
        except GitCommandError as e:
            failed = open_state.plan[open_state.steps_completed]
            logger.error(
                f"git {failed.value} failed",
                completed=open_state.steps_completed,
                error=str(e),
            )
            open_state.status = "failed"
            offer_manual_create(ctx.state, str(e))
            return End(open_state.status)

        open_state.status = "pushed"
        logger.info(
            f"Pushed {draft.branch} to {ctx.state.config.target_remote}"
        )

        from gitlab_mr.workflow.nodes.create_merge_request import (
            CreateMergeRequest,
        )
        return CreateMergeRequest()
