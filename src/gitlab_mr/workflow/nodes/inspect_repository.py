"""InspectRepository node - classify the working copy."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.git.status import inspect


@dataclass
class InspectRepository(BaseNode[State]):
    """Capture the RepositoryState every later decision is made from.

    Conflicted paths stop the workflow here, before any prompt.
    """

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "PrepareBranch":
        ctx.state.runtime.open.repository = await inspect(
            ctx.state.runtime.session.vcs,
            ctx.state.config.target_branch,
        )

        from gitlab_mr.workflow.nodes.prepare_branch import PrepareBranch
        return PrepareBranch()
