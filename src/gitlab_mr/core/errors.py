"""Exception types raised by gitlab-mr workflows.

Errors fall into four families that callers treat differently:

- InputValidationError: bad user input, reported before any side effect
- PreconditionError: repository or credential problems, fatal
- RemoteStateError: forge state the caller can recover from
- TransportError: git or HTTP failures, surfaced verbatim

UserCancelled sits outside the hierarchy. It is how a prompt that got
no answer ends a workflow, and it is never reported as an error.
"""

from __future__ import annotations

import re

GITLAB_COM_HOST = "gitlab.com"

_MR_REFERENCE = re.compile(r"!(\d+)")


class GitlabMrError(Exception):
    """Base class for every reportable gitlab-mr failure."""


class UserCancelled(Exception):  # noqa: N818
    """A prompt was dismissed; the workflow stops without side effects."""


# ============================================================
# VALIDATION
# ============================================================

class InputValidationError(GitlabMrError):
    pass


class EmptyBranchName(InputValidationError):  # noqa: N818
    def __init__(self):
        super().__init__("Branch name must be provided.")


class InvalidBranchName(InputValidationError):  # noqa: N818
    def __init__(self, branch: str):
        super().__init__("Branch name must not contain spaces.")
        self.branch = branch


class BranchEqualsTarget(InputValidationError):  # noqa: N818
    def __init__(self, target_branch: str):
        super().__init__(
            f"Target branch name cannot be same with origin branch "
            f"({target_branch})."
        )
        self.target_branch = target_branch


class EmptyCommitMessage(InputValidationError):  # noqa: N818
    def __init__(self):
        super().__init__("Commit message must be provided.")


class EmptyTitle(InputValidationError):  # noqa: N818
    def __init__(self):
        super().__init__("Merge request title must be provided.")


# ============================================================
# PRECONDITIONS
# ============================================================

class PreconditionError(GitlabMrError):
    pass


class UnresolvedConflicts(PreconditionError):  # noqa: N818
    def __init__(self, paths: list[str]):
        super().__init__(
            "Unresolved conflicts, please resolve before opening MR."
        )
        self.paths = list(paths)


class NoRemotesConfigured(PreconditionError):  # noqa: N818
    def __init__(self):
        super().__init__("No remotes configured.")


class RemoteNotFound(PreconditionError):  # noqa: N818
    def __init__(self, remote_name: str):
        super().__init__(f"Target remote {remote_name} does not exist.")
        self.remote_name = remote_name


class UnsupportedRemoteUrl(PreconditionError):  # noqa: N818
    """The remote is not hosted on a forge (a local path or file:// URL)."""

    def __init__(self, remote_name: str, url: str):
        super().__init__(
            f"Target remote {remote_name} is not a GitLab URL: {url}"
        )
        self.remote_name = remote_name
        self.url = url


class MissingAccessToken(PreconditionError):  # noqa: N818
    """No token is configured for the repository's GitLab host."""

    def __init__(self, api_url: str):
        self.api_url = api_url
        super().__init__(f"{self.preference} preference not set.")

    @property
    def preference(self) -> str:
        """Name of the preference the user has to set."""
        if self.api_url == f"https://{GITLAB_COM_HOST}":
            return "config.access_token"
        return f'config.access_tokens["{self.api_url}"]'

    @property
    def token_url(self) -> str:
        """Page on the forge where a personal access token is created."""
        return f"{self.api_url}/profile/personal_access_tokens"


# ============================================================
# REMOTE STATE
# ============================================================

class RemoteStateError(GitlabMrError):
    pass


class DuplicateMergeRequest(RemoteStateError):  # noqa: N818
    """An open MR already exists for the source branch.

    The forge names the existing request as ``!<iid>`` somewhere in its
    message; ``mr_iid`` holds that number, or None when the message
    carries no reference.
    """

    def __init__(self, message: str):
        super().__init__(message)
        match = _MR_REFERENCE.search(message)
        self.mr_iid = int(match.group(1)) if match else None


class NoMergeRequestsFound(RemoteStateError):  # noqa: N818
    def __init__(self):
        super().__init__("No MRs found.")


# ============================================================
# TRANSPORT
# ============================================================

class TransportError(GitlabMrError):
    pass


class ForgeError(TransportError):
    """The forge answered with a non-success status.

    ``status_code`` is 0 when the request never got a response.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ForgeConflict(ForgeError):  # noqa: N818
    """HTTP 409 from the forge."""

    def __init__(self, message: str):
        super().__init__(409, message)


class GitCommandError(TransportError):
    def __init__(self, command: str, returncode: int, stderr: str):
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"{command}: {detail}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "GITLAB_COM_HOST",
    "GitlabMrError",
    "UserCancelled",
    "InputValidationError",
    "EmptyBranchName",
    "InvalidBranchName",
    "BranchEqualsTarget",
    "EmptyCommitMessage",
    "EmptyTitle",
    "PreconditionError",
    "UnresolvedConflicts",
    "NoRemotesConfigured",
    "RemoteNotFound",
    "UnsupportedRemoteUrl",
    "MissingAccessToken",
    "RemoteStateError",
    "DuplicateMergeRequest",
    "NoMergeRequestsFound",
    "TransportError",
    "ForgeError",
    "ForgeConflict",
    "GitCommandError",
]
