"""ConnectForge node - resolve the target remote and its credentials."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.workflow.session import connect_forge


@dataclass
class ConnectForge(BaseNode[State]):
    """Bind the session to the project behind config.target_remote."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "InspectRepository":
        await connect_forge(ctx.state)

        from gitlab_mr.workflow.nodes.inspect_repository import (
            InspectRepository,
        )
        return InspectRepository()
