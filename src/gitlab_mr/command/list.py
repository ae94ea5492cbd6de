"""List command - print the project's open merge requests."""

from gitlab_mr.command.base import WorkflowCommand
from gitlab_mr.workflow.session import connect_forge, merge_request_choices


class ListCommand(WorkflowCommand):
    """List open merge requests of the target remote's project."""

    async def execute(self, state: "State") -> int:
        session = await connect_forge(state)
        mrs = await session.lifecycle.list()
        for choice in merge_request_choices(mrs, state.config.target_branch):
            session.prompter.status(f"{choice.label}  [{choice.description}]")
        return 0
