"""Tests for post-run action selection and result outputs."""

from __future__ import annotations

import json

import pytest

from junie_action.constants import OutputVars
from junie_action.junie.results import (
    ActionType,
    JunieOutput,
    build_result_outputs,
    decide_action,
    determine_action,
    load_junie_output,
    parse_results_file,
    resolve_results,
)


@pytest.mark.parametrize(
    "silent, changes, unpushed, comment_id, new_branch, expected",
    [
        (True, True, True, 101, True, ActionType.NOTHING),
        (False, False, False, 101, False, ActionType.WRITE_COMMENT),
        (False, False, True, None, False, ActionType.PUSH),
        (False, True, False, None, True, ActionType.CREATE_PR),
        (False, True, True, 101, False, ActionType.COMMIT_CHANGES),
        (False, False, False, None, True, ActionType.NOTHING),
    ],
)
def test_decide_action(silent, changes, unpushed, comment_id, new_branch, expected) -> None:
    """Each combination of tree state picks the expected action."""
    action = decide_action(
        silent_mode=silent,
        has_changes=changes,
        has_unpushed=unpushed,
        init_comment_id=comment_id,
        is_new_branch=new_branch,
    )
    assert action is expected


class TestDetermineAction:
    """Tests for inspecting the working tree."""

    def test_dirty_tree_on_new_branch(self, fake_git) -> None:
        """Changes on a new branch open a PR."""
        fake_git.set_result(["status", "--porcelain"], stdout=" M app.py\n")
        fake_git.set_result(["log", "@{u}..HEAD", "--oneline"], exit_code=128, stderr="no upstream")

        action = determine_action(fake_git, silent_mode=False, init_comment_id=None, is_new_branch=True)

        assert action is ActionType.CREATE_PR

    def test_unpushed_commits(self, fake_git) -> None:
        """Commits the agent made are pushed."""
        fake_git.set_result(["log", "@{u}..HEAD", "--oneline"], stdout="abc1234 agent commit\n")

        action = determine_action(fake_git, silent_mode=False, init_comment_id=None, is_new_branch=False)

        assert action is ActionType.PUSH

    def test_silent_mode_skips_git(self, fake_git) -> None:
        """Silent mode does not run git at all."""
        action = determine_action(fake_git, silent_mode=True, init_comment_id=101, is_new_branch=True)

        assert action is ActionType.NOTHING
        assert fake_git.calls == []


class TestOutputs:
    """Tests for the step outputs of each action."""

    def test_create_pr_outputs(self) -> None:
        """A PR gets a commit message, title and body linking the issue."""
        outputs = build_result_outputs(ActionType.CREATE_PR, "Fix build", "Changed CI", issue_id=12)

        assert outputs[OutputVars.ACTION_TO_DO] == "CREATE_PR"
        assert outputs[OutputVars.COMMIT_MESSAGE] == "[issue-12]\n\nFix build"
        assert outputs[OutputVars.PR_TITLE] == "[Junie]: Fix build"
        assert "- 🔗 **Issue:** Fixes: #12" in outputs[OutputVars.PR_BODY]
        assert outputs[OutputVars.PR_BODY].endswith("### 📊 Junie Summary:\nChanged CI\n")

    def test_commit_outputs_have_no_pr_fields(self) -> None:
        """A direct commit has no PR texts."""
        outputs = build_result_outputs(ActionType.COMMIT_CHANGES, "Fix build", "Changed CI")

        assert outputs[OutputVars.COMMIT_MESSAGE] == "Fix build"
        assert OutputVars.PR_TITLE not in outputs

    def test_write_comment_outputs(self) -> None:
        """A comment-only result exports title and summary only."""
        outputs = build_result_outputs(ActionType.WRITE_COMMENT, "Answer", "It works like this")

        assert set(outputs) == {OutputVars.ACTION_TO_DO, OutputVars.JUNIE_TITLE, OutputVars.JUNIE_SUMMARY}


class TestJunieOutput:
    """Tests for reading the agent's JSON output."""

    def test_loads_result(self) -> None:
        """Task name and result are read."""
        output = load_junie_output(json.dumps({"taskName": "fix", "result": "done", "errors": []}))
        assert (output.task_name, output.result) == ("fix", "done")

    def test_errors_fail_the_run(self) -> None:
        """Reported errors fail the run."""
        raw = json.dumps({"result": "", "errors": ["model unavailable", "timeout"]})
        with pytest.raises(RuntimeError, match="Junie run failed with errors: model unavailable\ntimeout"):
            load_junie_output(raw)


class TestResultsFile:
    """Tests for reading success.md."""

    def test_last_heading_is_title(self, tmp_path) -> None:
        """The last heading is the title and lines are stripped."""
        out = tmp_path / ".matterhorn" / "out"
        out.mkdir(parents=True)
        (out / "success.md").write_text("### Draft\n  text  \n### Final title\nmore\n", encoding="utf-8")

        results = parse_results_file(str(tmp_path))

        assert results.title == "Final title"
        assert results.body == "### Draft\ntext\n### Final title\nmore\n"

    def test_default_title(self, tmp_path) -> None:
        """A file without headings gets the default title."""
        out = tmp_path / ".matterhorn" / "out"
        out.mkdir(parents=True)
        (out / "success.md").write_text("just a summary", encoding="utf-8")

        assert parse_results_file(str(tmp_path)).title == "Junie finished task"

    def test_missing_file(self, tmp_path) -> None:
        """A missing file is an error."""
        with pytest.raises(RuntimeError, match="Junie results not found"):
            parse_results_file(str(tmp_path))


def write_success_file(working_dir, text: str) -> None:
    out = working_dir / ".matterhorn" / "out"
    out.mkdir(parents=True)
    (out / "success.md").write_text(text, encoding="utf-8")


class TestResolveResults:
    """Tests for choosing the reported title and summary."""

    def test_cli_output_wins(self, tmp_path) -> None:
        """The agent's JSON output is preferred over the file."""
        write_success_file(tmp_path, "### From file\nfile body")

        results = resolve_results(JunieOutput(task_name="Fix build", result="Changed CI"), str(tmp_path))

        assert (results.title, results.body) == ("Fix build", "Changed CI")

    def test_missing_result_is_read_from_file(self, tmp_path) -> None:
        """An empty result is read from success.md."""
        write_success_file(tmp_path, "### Updated docs\nRewrote the README")

        results = resolve_results(JunieOutput(task_name="", result=""), str(tmp_path))

        assert results.title == "Updated docs"
        assert results.body == "### Updated docs\nRewrote the README"

    def test_title_kept_when_only_result_missing(self, tmp_path) -> None:
        """Only the missing part comes from the file."""
        write_success_file(tmp_path, "### From file\nfile body")

        results = resolve_results(JunieOutput(task_name="Fix build", result=""), str(tmp_path))

        assert results.title == "Fix build"
        assert results.body == "### From file\nfile body"

    def test_no_file_uses_default_title(self, tmp_path) -> None:
        """Without output or file the default title is used."""
        results = resolve_results(JunieOutput(task_name="", result=""), str(tmp_path))

        assert (results.title, results.body) == ("Junie finished task", "")
