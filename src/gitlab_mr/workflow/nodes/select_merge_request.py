"""SelectMergeRequest node - first state of an edit run."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.workflow.session import select_merge_request


@dataclass
class SelectMergeRequest(BaseNode[State]):
    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "ChooseEditAction":
        edit_state = ctx.state.runtime.edit
        edit_state.merge_request = await select_merge_request(ctx.state)
        edit_state.status = "selected"

        from gitlab_mr.workflow.nodes.choose_edit_action import (
            ChooseEditAction,
        )
        return ChooseEditAction()
