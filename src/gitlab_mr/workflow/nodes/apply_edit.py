"""ApplyEdit node - ActionChosen(mr, action) → Applied | Failed."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import message
from gitlab_mr.edit.actions import apply_edit, success_message


@dataclass
class ApplyEdit(BaseNode[State, None, str]):
    async def run(self, ctx: GraphRunContext[State]) -> End[str]:
        """Apply the chosen action once.

        Returns:
            End[str]: "applied" or "failed"
        """
        edit_state = ctx.state.runtime.edit
        session = ctx.state.runtime.session

        outcome = await apply_edit(
            session.lifecycle, edit_state.merge_request, edit_state.action
        )
        edit_state.outcome = outcome
        edit_state.status = outcome.state

        if outcome.applied:
            text = success_message(outcome)
            logger.info(text)
            session.prompter.notify(message(text))
        else:
            session.prompter.notify(message(outcome.error), level="error")

        return End(edit_state.status)
