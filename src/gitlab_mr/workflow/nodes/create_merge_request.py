"""CreateMergeRequest node - open the merge request on the forge."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.core.errors import DuplicateMergeRequest, ForgeError
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import message
from gitlab_mr.core.yaml_settings import update_user_config

CREATE_ON_GITLAB = "Create on GitLab"
OPEN_EXISTING_MR = "Open existing MR on GitLab"
OPEN_MR = "Open MR"


def offer_manual_create(state: State, error: str) -> None:
    """Report a failed run and offer the forge's new-MR form instead."""
    session = state.runtime.session
    draft = state.runtime.open.draft
    url = session.lifecycle.build_create_url(
        draft.branch, draft.target_branch
    )
    selected = session.prompter.notify(
        error, level="error", actions=(CREATE_ON_GITLAB,)
    )
    if selected == CREATE_ON_GITLAB:
        session.prompter.open_url(url)


def offer_existing(state: State, duplicate: DuplicateMergeRequest) -> None:
    """Report a duplicate and offer the merge request that blocks it.

    Without an iid in the forge's message only the new-MR form can be
    offered.
    """
    if duplicate.mr_iid is None:
        offer_manual_create(state, str(duplicate))
        return

    session = state.runtime.session
    url = session.lifecycle.build_existing_mr_url(duplicate.mr_iid)
    selected = session.prompter.notify(
        str(duplicate), level="error", actions=(OPEN_EXISTING_MR,)
    )
    if selected == OPEN_EXISTING_MR:
        session.prompter.open_url(url)


@dataclass
class CreateMergeRequest(BaseNode[State, None, str]):
    """Submit the draft and report the result."""

    async def run(self, ctx: GraphRunContext[State]) -> End[str]:
        """Create the merge request.

        Returns:
            End[str]: "created", "duplicate" or "failed"
        """
        config = ctx.state.config
        session = ctx.state.runtime.session
        open_state = ctx.state.runtime.open
        draft = open_state.draft

        try:
            with logger.span(
                "Create merge request",
                branch=draft.branch,
                target_branch=draft.target_branch,
            ):
                mr = await session.lifecycle.create(
                    branch=draft.branch,
                    target_branch=draft.target_branch,
                    title=draft.title,
                    description=draft.description,
                    remove_source_branch=draft.remove_source_branch,
                    squash=draft.squash,
                    assignee_ids=draft.assignee_ids,
                    labels=draft.labels,
                )
        except DuplicateMergeRequest as e:
            open_state.status = "duplicate"
            offer_existing(ctx.state, e)
            return End(open_state.status)
        except ForgeError as e:
            open_state.status = "failed"
            offer_manual_create(ctx.state, e.message)
            return End(open_state.status)

        open_state.merge_request = mr
        open_state.status = "created"

        if config.remember_target_branch:
            try:
                path = update_user_config(
                    "config.target_branch", draft.target_branch
                )
            except OSError as e:
                # The MR exists; an unwritable config only loses the default
                logger.warn(
                    "Could not remember target branch",
                    target_branch=draft.target_branch,
                    error=str(e),
                )
            else:
                logger.debug("Remembered target branch", file=str(path))

        url = session.lifecycle.build_mr_url(mr, edit=config.open_to_edit)
        success = message(f"MR {mr.reference} created.")
        if config.auto_open_mr:
            session.prompter.open_url(url)
            session.prompter.notify(success)
        elif session.prompter.notify(success, actions=(OPEN_MR,)) == OPEN_MR:
            session.prompter.open_url(url)

        return End(open_state.status)
