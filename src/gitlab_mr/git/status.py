"""Working copy classification."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from gitlab_mr.core.errors import UnresolvedConflicts
from gitlab_mr.core.log import logger
from gitlab_mr.git.vcs import StatusSummary, VersionControl


class RepositoryState(BaseModel):
    """The facts every planning decision is made from.

    ``is_on_target_branch`` compares against the basis branch of the
    workflow, not against the merge request's target.
    """

    current_branch: str
    is_on_target_branch: bool
    is_clean: bool
    has_conflicts: bool = False
    last_log_message: str = ""

    model_config = ConfigDict(frozen=True)


def classify(status: StatusSummary, basis_branch: str) -> RepositoryState:
    """Reduce a status summary to a RepositoryState.

    Raises:
        UnresolvedConflicts: Any path is conflicted
    """
    if status.conflicted:
        raise UnresolvedConflicts(status.conflicted)

    is_clean = not (
        status.created
        or status.deleted
        or status.modified
        or status.not_added
        or status.renamed
    )
    current = status.current or ""
    return RepositoryState(
        current_branch=current,
        is_on_target_branch=current == basis_branch,
        is_clean=is_clean,
        has_conflicts=False,
        last_log_message=status.last_log_message,
    )


async def inspect(vcs: VersionControl, basis_branch: str) -> RepositoryState:
    """Query the working copy and classify it against basis_branch."""
    state = classify(await vcs.status(), basis_branch)
    logger.debug(
        "Repository state",
        current_branch=state.current_branch,
        on_basis_branch=state.is_on_target_branch,
        clean=state.is_clean,
    )
    return state
