"""Tests for the invoke-based command runner."""

import sys

import pytest
from invoke.exceptions import UnexpectedExit

from gitlab_mr.core.runner import Runner

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="uses POSIX shell commands"
)


def test_captures_output_in_cwd(tmp_path):
    (tmp_path / "marker.txt").write_text("x")

    result = Runner().execute("ls", cwd=tmp_path)

    assert result.exited == 0
    assert "marker.txt" in result.stdout


def test_nonzero_exit_without_check():
    result = Runner().execute("echo oops >&2; exit 3", check=False)

    assert result.exited == 3
    assert result.stderr.strip() == "oops"


def test_nonzero_exit_with_check_raises():
    with pytest.raises(UnexpectedExit):
        Runner().execute("exit 2")


def test_timeout_reports_minus_one():
    result = Runner().execute("sleep 5", timeout=1, check=False)

    assert result.exited == -1


def test_extra_environment():
    result = Runner().execute(
        "echo $GITLAB_MR_TEST_VALUE", env={"GITLAB_MR_TEST_VALUE": "hello"}
    )

    assert result.stdout.strip() == "hello"
