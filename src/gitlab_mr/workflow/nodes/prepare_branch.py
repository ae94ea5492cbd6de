"""PrepareBranch node - collect the form values and plan the git steps."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitlab_mr.core.config import State
from gitlab_mr.core.errors import EmptyTitle, UserCancelled
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import Prompter
from gitlab_mr.forge.models import MergeRequestDraft
from gitlab_mr.git.status import RepositoryState
from gitlab_mr.plan.branch import plan, should_commit, validate_branch_name


def _ask(prompter: Prompter, prompt: str, default: str | None) -> str:
    answer = prompter.ask_text(prompt, default=default or None)
    if answer is None:
        raise UserCancelled()
    return answer


def collect_draft(
    request: dict, repository: RepositoryState, state: State
) -> MergeRequestDraft:
    """Fill in the form values the command line left out.

    The branch defaults to the current branch, the title to the last
    commit message and the target to config.target_branch.
    """
    prompter = state.runtime.session.prompter
    values = {k: v for k, v in request.items() if v is not None}

    if "branch" not in values:
        default = (
            None if repository.is_on_target_branch
            else repository.current_branch
        )
        values["branch"] = _ask(prompter, "Branch name", default)
    if "target_branch" not in values:
        values["target_branch"] = _ask(
            prompter, "Target branch", state.config.target_branch
        )
    if "title" not in values:
        values["title"] = _ask(
            prompter, "MR title", repository.last_log_message
        )
    values.setdefault(
        "remove_source_branch", state.config.remove_source_branch
    )

    if not values["title"].strip():
        raise EmptyTitle()
    return MergeRequestDraft(**values)


@dataclass
class PrepareBranch(BaseNode[State]):
    """Validate the draft and decide which git steps run."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "ExecutePlan":
        open_state = ctx.state.runtime.open
        repository = open_state.repository

        draft = collect_draft(open_state.request, repository, ctx.state)
        open_state.draft = draft
        validate_branch_name(draft.branch, draft.target_branch)

        open_state.commit_changes = should_commit(
            repository,
            ctx.state.config.auto_commit_changes,
            ctx.state.runtime.session.prompter,
        )
        open_state.plan = plan(
            repository,
            desired_branch=draft.branch,
            commit_message=draft.effective_commit_message,
            mr_target_branch=draft.target_branch,
            commit_changes=open_state.commit_changes,
        )
        open_state.status = "planned"
        logger.info(
            f"Planned {len(open_state.plan)} git steps for {draft.branch}",
            steps=[step.value for step in open_state.plan],
        )

        from gitlab_mr.workflow.nodes.execute_plan import ExecutePlan
        return ExecutePlan()
