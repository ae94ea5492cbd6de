"""Tests for remote URL parsing, remote lookup and token resolution."""

import asyncio

import pytest
from conftest import FakeVcs

from gitlab_mr.core.errors import (
    MissingAccessToken,
    NoRemotesConfigured,
    RemoteNotFound,
    UnsupportedRemoteUrl,
)
from gitlab_mr.git.remote import (
    CredentialMap,
    describe_remote,
    parse_repo_url,
    resolve,
    resolve_token,
)
from gitlab_mr.git.vcs import Remote


@pytest.mark.parametrize(
    "url,expected",
    [
        ("git@gitlab.com:acme/app.git", ("gitlab.com", "acme/app", None)),
        (
            "ssh://git@gitlab.example.com:2222/group/sub/app.git",
            ("gitlab.example.com", "group/sub/app", None),
        ),
        (
            "https://user@gitlab.example.com/group/app",
            ("gitlab.example.com", "group/app", "https"),
        ),
        (
            "http://gitlab.local:8080/group/app.git/",
            ("gitlab.local:8080", "group/app", "http"),
        ),
    ],
)
def test_parse_repo_url_shapes(url, expected):
    assert parse_repo_url(url) == expected


def test_parse_repo_url_rejects_garbage():
    with pytest.raises(ValueError):
        parse_repo_url("not a url")


def test_describe_remote_encodes_project_path():
    remote = describe_remote("git@gitlab.com:acme/sub/app.git")

    assert remote.repo_id == "acme%2Fsub%2Fapp"
    assert remote.project_path == "acme/sub/app"
    assert remote.repo_host == "gitlab.com"
    assert remote.web_url == "https://gitlab.com"


def test_describe_remote_prefers_scheme_of_configured_token():
    """An ssh remote on a host configured with http:// stays on http."""
    credentials = CredentialMap(
        access_tokens={"http://gitlab.local": "secret"}
    )
    remote = describe_remote("git@gitlab.local:group/app.git", credentials)

    assert remote.web_protocol == "http"


def test_describe_remote_keeps_http_scheme_of_remote():
    remote = describe_remote("http://gitlab.local/group/app.git")

    assert remote.web_protocol == "http"


def test_resolve_without_remotes():
    vcs = FakeVcs(remotes=[])

    with pytest.raises(NoRemotesConfigured):
        asyncio.run(resolve(vcs, "origin"))


def test_resolve_unknown_remote():
    vcs = FakeVcs(remotes=[
        Remote(name="upstream", push_url="git@gitlab.com:acme/app.git"),
    ])

    with pytest.raises(RemoteNotFound) as excinfo:
        asyncio.run(resolve(vcs, "origin"))
    assert excinfo.value.remote_name == "origin"


@pytest.mark.parametrize(
    "url", ["/srv/git/app.git", "file:///srv/git/app.git"]
)
def test_resolve_local_remote_is_a_precondition_error(url):
    vcs = FakeVcs(remotes=[Remote(name="origin", push_url=url)])

    with pytest.raises(UnsupportedRemoteUrl) as excinfo:
        asyncio.run(resolve(vcs, "origin"))
    assert excinfo.value.url == url


def test_resolve_named_remote():
    vcs = FakeVcs(remotes=[
        Remote(name="upstream", push_url="git@gitlab.com:other/app.git"),
        Remote(name="origin", push_url="git@gitlab.com:acme/app.git"),
    ])

    remote = asyncio.run(resolve(vcs, "origin"))

    assert remote.project_path == "acme/app"


def test_token_for_gitlab_com_uses_dedicated_slot():
    credentials = CredentialMap(
        access_token="public-token",
        access_tokens={"https://gitlab.com": "ignored"},
    )

    assert resolve_token("gitlab.com", credentials) == "public-token"


def test_token_for_self_hosted_ignores_trailing_slash():
    credentials = CredentialMap(
        access_tokens={"https://gitlab.example.com/": "hosted-token"}
    )

    assert (
        resolve_token("gitlab.example.com", credentials) == "hosted-token"
    )


def test_missing_token_for_gitlab_com():
    with pytest.raises(MissingAccessToken) as excinfo:
        resolve_token("gitlab.com", CredentialMap(access_token="  "))

    error = excinfo.value
    assert error.preference == "config.access_token"
    assert error.token_url == (
        "https://gitlab.com/profile/personal_access_tokens"
    )


def test_missing_token_for_self_hosted_names_the_map_key():
    with pytest.raises(MissingAccessToken) as excinfo:
        resolve_token("gitlab.local", CredentialMap(), web_protocol="http")

    assert excinfo.value.preference == (
        'config.access_tokens["http://gitlab.local"]'
    )
    assert "preference not set" in str(excinfo.value)
