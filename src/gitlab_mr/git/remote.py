"""Remote URL parsing and access token resolution."""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlsplit

from pydantic import BaseModel, ConfigDict

from gitlab_mr.core.errors import (
    GITLAB_COM_HOST,
    MissingAccessToken,
    NoRemotesConfigured,
    RemoteNotFound,
    UnsupportedRemoteUrl,
)
from gitlab_mr.git.vcs import VersionControl

# git@host:group/project.git
_SCP_LIKE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")


class RemoteDescriptor(BaseModel):
    """Where a repository lives on its forge."""

    repo_id: str
    repo_host: str
    web_protocol: str = "https"

    model_config = ConfigDict(frozen=True)

    @property
    def project_path(self) -> str:
        return unquote(self.repo_id)

    @property
    def web_url(self) -> str:
        return f"{self.web_protocol}://{self.repo_host}"


class CredentialMap(BaseModel):
    """Access tokens: one slot for gitlab.com, the rest keyed by URL."""

    access_token: str | None = None
    access_tokens: dict[str, str] = {}

    model_config = ConfigDict(frozen=True)

    def hosts(self) -> dict[str, str]:
        """Map each self-hosted host to the scheme its key uses."""
        hosts = {}
        for url in self.access_tokens:
            parts = urlsplit(url if "://" in url else f"https://{url}")
            if parts.netloc:
                hosts[parts.netloc] = parts.scheme or "https"
        return hosts

    def token_for(self, api_url: str) -> str | None:
        wanted = api_url.rstrip("/")
        for url, token in self.access_tokens.items():
            if url.rstrip("/") == wanted:
                return token
        return None


def parse_repo_url(url: str) -> tuple[str, str, str | None]:
    """Split a remote URL into host, project path and web scheme.

    Handles scp-like ssh (git@host:group/proj.git), ssh:// and
    http(s):// URLs. The scheme is only reported for http(s) remotes;
    for ssh the port belongs to sshd, not to the web server, so it is
    dropped.

    Returns:
        (host, path, scheme) with path stripped of slashes and ".git"

    Raises:
        ValueError: If no host or path can be extracted
    """
    url = url.strip()
    scheme = None
    if "://" in url:
        parts = urlsplit(url)
        if parts.scheme in ("http", "https"):
            scheme = parts.scheme
            host = parts.hostname or ""
            if parts.port:
                host = f"{host}:{parts.port}"
        else:
            host = parts.hostname or ""
        path = parts.path
    else:
        match = _SCP_LIKE.match(url)
        if not match:
            raise ValueError(f"Unrecognized remote URL: {url}")
        host, path = match.group("host"), match.group("path")

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    if not host or not path:
        raise ValueError(f"Unrecognized remote URL: {url}")
    return host, path, scheme


def describe_remote(
    url: str, credentials: CredentialMap | None = None
) -> RemoteDescriptor:
    """Build the RemoteDescriptor for a push URL.

    The web protocol comes from the configured token keys when the host
    is known there, then from the URL itself, then defaults to https.
    """
    host, path, scheme = parse_repo_url(url)
    known = credentials.hosts() if credentials else {}
    protocol = known.get(host) or scheme or "https"
    return RemoteDescriptor(
        repo_id=quote(path, safe=""),
        repo_host=host,
        web_protocol=protocol,
    )


async def resolve(
    vcs: VersionControl,
    remote_name: str,
    credentials: CredentialMap | None = None,
) -> RemoteDescriptor:
    """Describe the remote called remote_name.

    Raises:
        NoRemotesConfigured: The repository has no remotes
        RemoteNotFound: No remote is called remote_name
        UnsupportedRemoteUrl: The push URL names no forge host
    """
    remotes = await vcs.list_remotes()
    if not remotes:
        raise NoRemotesConfigured()

    remote = next((r for r in remotes if r.name == remote_name), None)
    if remote is None:
        raise RemoteNotFound(remote_name)

    try:
        return describe_remote(remote.push_url, credentials)
    except ValueError:
        raise UnsupportedRemoteUrl(remote_name, remote.push_url) from None


def api_base_url(repo_host: str, web_protocol: str = "https") -> str:
    return f"{web_protocol}://{repo_host}"


def resolve_token(
    repo_host: str,
    credentials: CredentialMap,
    web_protocol: str = "https",
) -> str:
    """Pick the access token for repo_host.

    gitlab.com uses the dedicated access_token slot; every other host
    is looked up by its API base URL.

    Raises:
        MissingAccessToken: No (non-empty) token for the host
    """
    api_url = api_base_url(repo_host, web_protocol)
    if repo_host == GITLAB_COM_HOST:
        token = credentials.access_token
    else:
        token = credentials.token_for(api_url)

    if not token or not token.strip():
        raise MissingAccessToken(api_url)
    return token.strip()
