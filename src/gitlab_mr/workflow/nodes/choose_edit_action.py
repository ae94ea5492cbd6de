"""ChooseEditAction node - Selected(mr) → ActionChosen(mr, action)."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.core.errors import UserCancelled
from gitlab_mr.core.prompt import Choice, Prompter
from gitlab_mr.edit import actions
from gitlab_mr.forge.lifecycle import MrLifecycleClient
from gitlab_mr.forge.models import MergeRequest, User

SEARCH_AGAIN = "Search again..."


async def search_user(
    prompter: Prompter, lifecycle: MrLifecycleClient
) -> User:
    """Ask for a search term until the user picks one of the matches.

    Raises:
        UserCancelled: The search or the selection was dismissed
    """
    while True:
        query = prompter.ask_text("Search for user...")
        if not query:
            raise UserCancelled()

        users = await lifecycle.search_users(query)
        options = [Choice(label=user.label, value=user) for user in users]
        options.append(Choice(label=SEARCH_AGAIN, value=SEARCH_AGAIN))

        selected = prompter.choose("Select a user...", options)
        if selected is None:
            raise UserCancelled()
        if selected.value != SEARCH_AGAIN:
            return selected.value


async def choose_action(
    mr: MergeRequest, prompter: Prompter, lifecycle: MrLifecycleClient
) -> actions.EditAction:
    selected = prompter.choose(
        "Select an action...", actions.available_actions(mr)
    )
    if selected is None:
        raise UserCancelled()

    kind = selected.value
    if kind == actions.EDIT_TITLE:
        title = prompter.ask_text("MR title", default=mr.title)
        if title is None:
            raise UserCancelled()
        return actions.EditTitle(title)
    if kind == actions.TOGGLE_WIP:
        return actions.ToggleWip()
    if kind == actions.REMOVE_ASSIGNEE:
        return actions.SetAssignee(None)

    user = await search_user(prompter, lifecycle)
    if kind == actions.EDIT_ASSIGNEE:
        return actions.SetAssignee(user.id, user.username)
    return actions.AddApprover(user.id, user.username)


@dataclass
class ChooseEditAction(BaseNode[State]):
    async def run(self, ctx: GraphRunContext[State]) -> "ApplyEdit":
        edit_state = ctx.state.runtime.edit
        session = ctx.state.runtime.session

        edit_state.action = await choose_action(
            edit_state.merge_request, session.prompter, session.lifecycle
        )
        edit_state.status = "chosen"

        from gitlab_mr.workflow.nodes.apply_edit import ApplyEdit
        return ApplyEdit()
