"""Shared error handling for workflow commands."""

from pydantic import BaseModel
from pydantic_graph import End

from gitlab_mr.core.errors import (
    GitlabMrError,
    MissingAccessToken,
    NoMergeRequestsFound,
    UserCancelled,
)
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import message
from gitlab_mr.workflow.session import close_forge, prompter

GENERATE_ACCESS_TOKEN = "Generate Access Token"


async def run_graph(workflow, start, state):
    """Run workflow from start and return the End node's data."""
    async with workflow.iter(start, state=state) as run:
        async for node in run:
            if isinstance(node, End):
                return node.data
    return None


class WorkflowCommand(BaseModel):
    """Base for commands that run one workflow.

    Subclasses implement execute(); run_workflow() turns what it raises
    into a message and an exit code.
    """

    async def execute(self, state: "State") -> int:
        raise NotImplementedError

    async def run_workflow(self, state: "State") -> int:
        """Run the command.

        Args:
            state: State instance with config loaded and runtime initialized

        Returns:
            Exit code (0=success or cancelled, 1=reported error)
        """
        ui = prompter(state)
        try:
            return await self.execute(state)
        except UserCancelled:
            logger.debug("Cancelled by user")
            return 0
        except NoMergeRequestsFound as e:
            ui.notify(message(str(e)))
            return 0
        except MissingAccessToken as e:
            logger.error(str(e), api_url=e.api_url)
            selected = ui.notify(
                message(str(e)),
                level="error",
                actions=(GENERATE_ACCESS_TOKEN,),
            )
            if selected == GENERATE_ACCESS_TOKEN:
                ui.open_url(e.token_url)
            return 1
        except GitlabMrError as e:
            logger.error(str(e), error=type(e).__name__)
            ui.notify(message(str(e)), level="error")
            return 1
        finally:
            await close_forge(state)
