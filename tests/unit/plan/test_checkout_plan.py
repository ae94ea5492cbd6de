"""Tests for merge request checkout planning."""

import asyncio

from conftest import FakeVcs, mr_payload

from gitlab_mr.forge.models import MergeRequest
from gitlab_mr.plan.checkout import FetchThenTrack, SwitchTo, execute, plan


def _mr(source_branch):
    return MergeRequest.from_api(mr_payload(7, source_branch=source_branch))


def test_existing_local_branch_is_switched_to():
    step = plan(_mr("feature"), {"master": "a", "feature": "b"}, "origin")

    assert step == SwitchTo("feature")


def test_missing_branch_is_fetched_and_tracked():
    step = plan(_mr("feature"), {"master": "a"}, "upstream")

    assert step == FetchThenTrack("upstream", "feature")
    assert step.upstream == "upstream/feature"


def test_switch_runs_single_checkout():
    vcs = FakeVcs()

    asyncio.run(execute(SwitchTo("feature"), vcs))

    assert vcs.calls == [("checkout_branch", ["feature"])]


def test_fetch_then_track_creates_only_the_source_branch():
    vcs = FakeVcs()

    asyncio.run(execute(FetchThenTrack("origin", "feature"), vcs))

    assert vcs.calls == [
        ("fetch", "origin", "feature"),
        ("checkout_branch", ["-b", "feature", "origin/feature"]),
    ]
