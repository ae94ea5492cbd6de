"""Pytest configuration and fixtures for gitlab-mr tests."""

import json
import sys
import tempfile
from pathlib import Path

import httpx
import pytest

from gitlab_mr.core.log import ConsoleSink, setup_logger
from gitlab_mr.git.vcs import Remote, StatusSummary


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only mode during tests.

    This enables debug output during test runs without requiring
    authentication or sending logs to logfire.dev.
    """
    test_log_root = Path(tempfile.gettempdir()) / "gitlab-mr-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path, monkeypatch):
    """Keep tests away from the real user config file."""
    path = tmp_path / "user-config" / "gitlab-mr.yaml"
    monkeypatch.setattr(
        "gitlab_mr.core.yaml_settings.user_config_file", lambda: path
    )
    return path


@pytest.fixture
def mock_argv():
    """Save and restore sys.argv."""
    original = sys.argv.copy()
    sys.argv = ["gitlab-mr"]
    yield
    sys.argv = original


@pytest.fixture
def state(mock_argv, tmp_path, monkeypatch):
    """State loaded from package defaults only, rooted in tmp_path."""
    from gitlab_mr.core.config import State

    monkeypatch.chdir(tmp_path)
    return State()


# ============================================================
# IN-MEMORY COLLABORATORS
# ============================================================

class FakeVcs:
    """VersionControl that records calls instead of running git."""

    def __init__(
        self,
        status=None,
        branches=None,
        remotes=None,
        fail_on=None,
    ):
        self._status = status or StatusSummary(current="master")
        self.branches = branches if branches is not None else {"master": "a1"}
        self.remotes = (
            remotes if remotes is not None
            else [Remote(name="origin", push_url="git@gitlab.com:acme/app.git")]
        )
        self.fail_on = fail_on
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name == self.fail_on:
            from gitlab_mr.core.errors import GitCommandError
            raise GitCommandError(f"git {name}", 1, f"{name} rejected")

    async def status(self):
        self._record("status")
        return self._status

    async def list_branches(self):
        self._record("list_branches")
        return dict(self.branches)

    async def create_branch(self, name):
        self._record("create_branch", name)

    async def checkout_branch(self, args):
        self._record("checkout_branch", list(args))

    async def add_all(self):
        self._record("add_all")

    async def commit(self, message):
        self._record("commit", message)

    async def push(self, remote, branch):
        self._record("push", remote, branch)

    async def fetch(self, remote, branch):
        self._record("fetch", remote, branch)

    async def list_remotes(self):
        self._record("list_remotes")
        return list(self.remotes)

    @property
    def names(self):
        return [call[0] for call in self.calls]


class FakePrompter:
    """Prompter answering from queues.

    ``texts`` answers ask_text in order, ``choices`` answers choose()
    with a label to pick (or None to dismiss), ``actions`` answers
    notify() calls that offer actions.
    """

    def __init__(self, texts=(), choices=(), actions=()):
        self.texts = list(texts)
        self.choices = list(choices)
        self.actions = list(actions)
        self.asked = []
        self.offered = []
        self.statuses = []
        self.notifications = []
        self.opened = []

    def ask_text(self, prompt, default=None, validate=None):
        self.asked.append((prompt, default))
        if not self.texts:
            return default
        answer = self.texts.pop(0)
        if answer == "" and default:
            return default
        return answer

    def choose(self, prompt, options):
        self.offered.append((prompt, [option.label for option in options]))
        label = self.choices.pop(0) if self.choices else None
        if label is None:
            return None
        for option in options:
            if option.label == label:
                return option
        raise AssertionError(f"{label!r} not offered: {options}")

    def status(self, message):
        self.statuses.append(message)

    def notify(self, message, level="info", actions=()):
        self.notifications.append((level, message, tuple(actions)))
        if actions and self.actions:
            return self.actions.pop(0)
        return None

    def open_url(self, url):
        self.opened.append(url)


class GitLabApi:
    """httpx.MockTransport handler with canned GitLab responses.

    Routes map "METHOD /path" (path below /api/v4, still encoded) to a
    (status, json) pair; every request is recorded.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode().split("?")[0]
        path = path.removeprefix("/api/v4")
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body, request))

        key = f"{request.method} {path}"
        if key not in self.routes:
            return httpx.Response(404, json={"message": "404 Not Found"})
        status, payload = self.routes[key]
        return httpx.Response(status, json=payload)

    def transport(self):
        return httpx.MockTransport(self)

    def sent(self, method, path):
        return [
            body for m, p, body, _ in self.requests
            if m == method and p == path
        ]


def mr_payload(iid=1, **overrides):
    payload = {
        "iid": iid,
        "id": 1000 + iid,
        "title": f"Change {iid}",
        "source_branch": f"feature-{iid}",
        "target_branch": "master",
        "description": "",
        "web_url": f"https://gitlab.com/acme/app/-/merge_requests/{iid}",
        "work_in_progress": False,
        "assignee": None,
        "labels": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def fake_vcs():
    return FakeVcs()


@pytest.fixture
def prompter():
    return FakePrompter()


@pytest.fixture
def gitlab_api():
    return GitLabApi()
