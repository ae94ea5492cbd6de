"""Tests for the terminal prompter."""

import io

from gitlab_mr.core.prompt import Choice, ConsolePrompter, message


def _prompter(answers):
    stdout = io.StringIO()
    return ConsolePrompter(stdin=io.StringIO(answers), stdout=stdout), stdout


def test_message_prefix():
    assert message("MR !3 created.") == "Gitlab MR: MR !3 created."


def test_ask_text_uses_default_on_empty_answer():
    prompter, stdout = _prompter("\n")

    assert prompter.ask_text("Branch name", default="feature") == "feature"
    assert "Branch name [feature]: " in stdout.getvalue()


def test_ask_text_end_of_input_is_no_answer():
    prompter, _ = _prompter("")

    assert prompter.ask_text("Branch name") is None


def test_ask_text_repeats_until_valid():
    prompter, stdout = _prompter("a b\nab\n")

    def no_spaces(value):
        return "no spaces" if " " in value else None

    assert prompter.ask_text("Branch", validate=no_spaces) == "ab"
    assert "no spaces" in stdout.getvalue()


def test_choose_by_number():
    prompter, stdout = _prompter("9\n2\n")
    options = [
        Choice(label="MR !1: One", value=1, description="one"),
        Choice(label="MR !2: Two", value=2, detail="line 1\nline 2"),
    ]

    assert prompter.choose("Select MR", options).value == 2
    output = stdout.getvalue()
    assert "1) MR !1: One  [one]" in output
    assert "line 1" in output and "line 2" not in output
    assert "Enter a number between 1 and 2" in output


def test_choose_empty_answer_is_no_answer():
    prompter, _ = _prompter("\n")

    assert prompter.choose("Select", [Choice(label="Yes")]) is None


def test_notify_with_actions():
    prompter, stdout = _prompter("1\n")

    selected = prompter.notify("boom", level="error", actions=("Retry",))

    assert selected == "Retry"
    assert stdout.getvalue().startswith("Error: boom\n")


def test_notify_without_actions_does_not_read():
    prompter, _ = _prompter("1\n")

    assert prompter.notify("done") is None
    assert prompter.stdin.read() == "1\n"
