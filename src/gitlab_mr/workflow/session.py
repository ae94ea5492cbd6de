"""Collaborators shared by the workflow graphs."""

from __future__ import annotations

from gitlab_mr.core.config import SessionState, State
from gitlab_mr.core.errors import UserCancelled
from gitlab_mr.core.log import logger
from gitlab_mr.core.prompt import Choice, ConsolePrompter, Prompter
from gitlab_mr.forge.client import GitLabClient
from gitlab_mr.forge.lifecycle import MrLifecycleClient
from gitlab_mr.forge.models import MergeRequest
from gitlab_mr.git import remote as remote_resolver
from gitlab_mr.git.repo import GitRepository


def credentials(state: State) -> remote_resolver.CredentialMap:
    return remote_resolver.CredentialMap(
        access_token=state.config.access_token,
        access_tokens=state.config.access_tokens,
    )


def prompter(state: State) -> Prompter:
    session = state.runtime.session
    if session.prompter is None:
        session.prompter = ConsolePrompter()
    return session.prompter


def vcs(state: State):
    session = state.runtime.session
    if session.vcs is None:
        session.vcs = GitRepository(
            workdir=state.config.workdir,
            commands=state.config.commands.get("git", {}),
            timeout=state.config.git.timeout,
        )
    return session.vcs


async def connect_forge(state: State) -> SessionState:
    """Resolve the target remote and bind a lifecycle client to it.

    Collaborators already present on the session (fakes in tests) are
    kept; missing ones are built from preferences.

    Raises:
        NoRemotesConfigured: The repository has no remotes
        RemoteNotFound: config.target_remote does not exist
        MissingAccessToken: No token for the remote's host
    """
    session = state.runtime.session
    if session.lifecycle is not None:
        return session

    prompter(state)
    creds = credentials(state)
    descriptor = await remote_resolver.resolve(
        vcs(state), state.config.target_remote, creds
    )
    session.remote = descriptor

    if session.forge is None:
        token = remote_resolver.resolve_token(
            descriptor.repo_host, creds, descriptor.web_protocol
        )
        session.forge = GitLabClient(
            api_url=remote_resolver.api_base_url(
                descriptor.repo_host, descriptor.web_protocol
            ),
            token=token,
            timeout=state.config.forge.timeout,
            per_page=state.config.forge.per_page,
        )

    session.lifecycle = MrLifecycleClient(session.forge, descriptor)
    logger.debug(
        "Connected to forge",
        remote=state.config.target_remote,
        host=descriptor.repo_host,
        project=descriptor.project_path,
    )
    return session


async def close_forge(state: State) -> None:
    """Close the HTTP client, if this session opened one."""
    forge = state.runtime.session.forge
    if isinstance(forge, GitLabClient):
        await forge.aclose()


def merge_request_choices(
    mrs: list[MergeRequest], basis_branch: str
) -> list[Choice]:
    """Selection entries: "MR !iid: title", source branch (and target
    when it is not the basis branch), description as detail."""
    choices = []
    for mr in mrs:
        description = mr.source_branch
        if mr.target_branch != basis_branch:
            description += f" > {mr.target_branch}"
        choices.append(Choice(
            label=f"MR {mr.reference}: {mr.title}",
            value=mr,
            description=description,
            detail=mr.description or "",
        ))
    return choices


async def select_merge_request(state: State) -> MergeRequest:
    """Let the user pick one of the project's open merge requests.

    Raises:
        NoMergeRequestsFound: The project has no open merge requests
        UserCancelled: Nothing was selected
    """
    session = await connect_forge(state)
    mrs = await session.lifecycle.list()
    selected = session.prompter.choose(
        "Select MR", merge_request_choices(mrs, state.config.target_branch)
    )
    if selected is None:
        raise UserCancelled()
    return selected.value
