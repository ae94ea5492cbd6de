"""ViewMergeRequest node - open a selected merge request in the browser."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.workflow.session import select_merge_request


@dataclass
class ViewMergeRequest(BaseNode[State, None, str]):
    async def run(self, ctx: GraphRunContext[State]) -> End[str]:
        mr = await select_merge_request(ctx.state)
        session = ctx.state.runtime.session
        session.prompter.open_url(session.lifecycle.build_mr_url(mr))
        return End(mr.web_url)
