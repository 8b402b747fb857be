"""Tests for the core review pipeline: review_file and run_changes_review."""

import io

import pytest
from rich.console import Console

from cr_core.config import DEFAULT_CONFIG
from cr_core.git import ChangeKind, ChangeRecord, GitCommandError, NotARepositoryError
from cr_core.models import DEFAULT_MODEL, MODELS, ModelDescriptor
from cr_core.providers.base import FailureKind, ReviewResult
from cr_core.providers.gemini import GeminiReviewer
from cr_core.render import RenderOptions, SectionCategory
from cr_core.reviewer import FileStatus, get_reviewer, review_file, run_changes_review

SIMPLE_DIFF = "@@ -1 +1 @@\n-x = 1\n+x = 2\n"
REVIEW_TEXT = "SUMMARY:\nRenames a value.\n\nISSUES:\n- No issues found.\n"


def make_console():
    return Console(file=io.StringIO(), width=80, color_system=None, highlight=False)


def output(console):
    return console.file.getvalue()


def make_config(**overrides):
    return {**DEFAULT_CONFIG, "rules": ["Check error handling"], "resolved_api_key": "key", **overrides}


def modified(path):
    return ChangeRecord(path, ChangeKind.MODIFIED)


class StubCollector:
    """Stands in for DiffCollector; records which paths had their diff read."""

    def __init__(self, changes=(), diffs=None, errors=None, list_error=None):
        self._changes = list(changes)
        self._diffs = diffs or {}
        self._errors = errors or {}
        self._list_error = list_error
        self.diff_calls = []

    def list_changes(self):
        if self._list_error:
            raise self._list_error
        return self._changes

    def get_diff(self, path):
        self.diff_calls.append(path)
        if path in self._errors:
            raise self._errors[path]
        return self._diffs.get(path, "")


class StubReviewer:
    def __init__(self, results=None):
        self._results = list(results or [])
        self.prompts = []
        self.closed = False

    def send(self, instruction):
        self.prompts.append(instruction)
        if self._results:
            return self._results.pop(0)
        return ReviewResult.success(REVIEW_TEXT)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def run(collector, reviewer=None, config=None):
    console = make_console()
    summary = run_changes_review(
        config or make_config(),
        console=console,
        collector=collector,
        reviewer=reviewer or StubReviewer(),
    )
    return summary, output(console)


# ---------------------------------------------------------------------------
# run_changes_review
# ---------------------------------------------------------------------------


class TestRunChangesReview:
    def test_binary_file_skipped_without_reading_diff(self):
        collector = StubCollector([modified("a.py"), modified("image.png")], diffs={"a.py": SIMPLE_DIFF})
        reviewer = StubReviewer()

        summary, out = run(collector, reviewer)

        assert (summary.total, summary.reviewed, summary.skipped, summary.failed) == (2, 1, 1, 0)
        assert collector.diff_calls == ["a.py"]
        assert len(reviewer.prompts) == 1
        assert "Skipping likely binary file: image.png" in out
        assert "Files reviewed: 1/2" in out

    def test_remote_failure_does_not_stop_other_files(self):
        paths = ["a.py", "b.py", "c.py"]
        collector = StubCollector([modified(p) for p in paths], diffs={p: SIMPLE_DIFF for p in paths})
        reviewer = StubReviewer(
            [
                ReviewResult.success(REVIEW_TEXT),
                ReviewResult.failure("429 Too Many Requests"),
                ReviewResult.success(REVIEW_TEXT),
            ]
        )

        summary, out = run(collector, reviewer)

        assert (summary.reviewed, summary.failed, summary.skipped) == (2, 1, 0)
        assert [o.status for o in summary.outcomes] == [FileStatus.REVIEWED, FileStatus.FAILED, FileStatus.REVIEWED]
        assert "Error processing b.py:" in out
        assert "429 Too Many Requests" in out
        assert "Files failed: 1" in out

    def test_diff_error_recorded_as_failure(self):
        collector = StubCollector(
            [modified("a.py"), modified("b.py")],
            diffs={"b.py": SIMPLE_DIFF},
            errors={"a.py": GitCommandError("git diff failed")},
        )

        summary, out = run(collector)

        assert summary.outcomes[0].status is FileStatus.FAILED
        assert summary.outcomes[1].status is FileStatus.REVIEWED
        assert "git diff failed" in out

    def test_empty_diff_skipped(self):
        summary, out = run(StubCollector([modified("a.py")]))
        assert summary.skipped == 1
        assert summary.reviewed == 0
        assert "No diff available for a.py" in out

    def test_files_processed_in_discovery_order(self):
        changes = [modified("z.py"), ChangeRecord("a.py", ChangeKind.CREATED), modified("m.py")]
        diffs = {c.path: f"@@ -0,0 +1 @@\n+marker_{c.path[0]} = 1\n" for c in changes}
        reviewer = StubReviewer()

        summary, _ = run(StubCollector(changes, diffs=diffs), reviewer)

        assert [o.path for o in summary.outcomes] == ["z.py", "a.py", "m.py"]
        for prompt, tag in zip(reviewer.prompts, "zam"):
            assert f"marker_{tag}" in prompt

    def test_missing_credential_prints_fallback_and_counts_as_reviewed(self):
        reviewer = StubReviewer([ReviewResult.failure("no key", FailureKind.NO_CREDENTIAL)])

        summary, out = run(StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF}), reviewer)

        assert summary.reviewed == 1
        assert "No API key found" in out
        assert "GEMINI_API_KEY" in out
        assert summary.outcomes[0].sections == ()

    def test_review_text_is_rendered(self):
        reviewer = StubReviewer([ReviewResult.success("**ISSUES:**\n```py\nx = 1\n```\n")])

        _, out = run(StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF}), reviewer)

        assert "--- Code Block (py) ---" in out
        assert "--- End Code Block ---" in out
        assert "**" not in out

    def test_light_review_prompt(self):
        reviewer = StubReviewer()
        run(StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF}), reviewer, make_config(light_review=True))
        assert "BEST PRACTICES:" in reviewer.prompts[0]
        assert "SUMMARY:" not in reviewer.prompts[0]

    def test_rules_and_instruction_in_prompt(self):
        reviewer = StubReviewer()
        config = make_config(instruction="Focus on SQL.")
        run(StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF}), reviewer, config)
        assert reviewer.prompts[0].startswith("Focus on SQL.")
        assert "- Check error handling" in reviewer.prompts[0]

    def test_long_diff_truncated(self):
        reviewer = StubReviewer()
        config = make_config(max_chars_per_file=10)
        run(StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF * 5}), reviewer, config)
        assert "[diff truncated]" in reviewer.prompts[0]

    def test_no_changes(self):
        reviewer = StubReviewer()
        summary, out = run(StubCollector([]), reviewer)

        assert summary.total == 0
        assert summary.outcomes == []
        assert reviewer.prompts == []
        assert "No changed files found" in out
        assert "REVIEW SUMMARY" not in out

    def test_missing_config(self):
        console = make_console()
        assert run_changes_review(None, console=console, collector=StubCollector([modified("a.py")])) is None
        assert "cr init" in output(console)

    def test_not_a_repository(self):
        summary, out = run(StubCollector(list_error=NotARepositoryError("not a repo")))
        assert summary is None
        assert "Not a git repository" in out

    def test_git_status_failure(self):
        summary, out = run(StubCollector(list_error=GitCommandError("fatal: bad index")))
        assert summary is None
        assert "fatal: bad index" in out

    def test_unsupported_model_falls_back(self):
        summary, out = run(StubCollector([]), config=make_config(model="made-up-model"))
        assert summary.model == DEFAULT_MODEL
        assert "Model made-up-model not supported" in out

    def test_missing_provider_sdk(self, mocker):
        mocker.patch("cr_core.reviewer.get_reviewer", side_effect=ImportError("pip install openai"))
        console = make_console()

        summary = run_changes_review(make_config(), console=console, collector=StubCollector([modified("a.py")]))

        assert summary is None
        assert "pip install openai" in output(console)

    def test_created_reviewer_closed_after_run(self, mocker):
        reviewer = StubReviewer()
        mocker.patch("cr_core.reviewer.get_reviewer", return_value=reviewer)
        collector = StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF})

        summary = run_changes_review(make_config(), console=make_console(), collector=collector)

        assert summary.reviewed == 1
        assert reviewer.closed

    def test_created_reviewer_closed_when_nothing_changed(self, mocker):
        reviewer = StubReviewer()
        mocker.patch("cr_core.reviewer.get_reviewer", return_value=reviewer)

        run_changes_review(make_config(), console=make_console(), collector=StubCollector([]))

        assert reviewer.closed

    def test_injected_reviewer_left_open(self):
        reviewer = StubReviewer()
        run(StubCollector([modified("a.py")], diffs={"a.py": SIMPLE_DIFF}), reviewer)
        assert not reviewer.closed


# ---------------------------------------------------------------------------
# review_file
# ---------------------------------------------------------------------------


class TestReviewFile:
    def _review(self, change, collector, reviewer, config=None):
        return review_file(
            change,
            collector,
            reviewer,
            config or make_config(),
            MODELS[DEFAULT_MODEL],
            make_console(),
            RenderOptions(color=False),
        )

    def test_extra_text_extension_reviewed(self):
        collector = StubCollector(diffs={"api.proto": SIMPLE_DIFF})
        outcome = self._review(modified("api.proto"), collector, StubReviewer(), make_config(text_extensions=["proto"]))
        assert outcome.status is FileStatus.REVIEWED

    def test_empty_model_response_is_failure(self):
        reviewer = StubReviewer([ReviewResult.failure("empty", FailureKind.EMPTY_RESPONSE)])
        outcome = self._review(modified("a.py"), StubCollector(diffs={"a.py": SIMPLE_DIFF}), reviewer)
        assert outcome.status is FileStatus.FAILED
        assert outcome.reason == "empty"

    def test_records_section_categories(self):
        outcome = self._review(modified("a.py"), StubCollector(diffs={"a.py": SIMPLE_DIFF}), StubReviewer())
        assert outcome.sections == (SectionCategory.SUMMARY, SectionCategory.ISSUE)

    def test_emphasised_headers_still_categorised(self):
        reviewer = StubReviewer([ReviewResult.success("**SECURITY:**\n- none\n")])
        outcome = self._review(modified("a.py"), StubCollector(diffs={"a.py": SIMPLE_DIFF}), reviewer)
        assert outcome.sections == (SectionCategory.SECURITY,)


# ---------------------------------------------------------------------------
# get_reviewer
# ---------------------------------------------------------------------------


class TestGetReviewer:
    def test_gemini_model(self):
        reviewer = get_reviewer(MODELS["gemini-1.5-flash"], "key")
        assert isinstance(reviewer, GeminiReviewer)
        assert reviewer.model == "gemini-1.5-flash"
        assert reviewer.api_key == "key"

    def test_unknown_provider(self):
        descriptor = ModelDescriptor(id="x", provider="mystery", label="", description="", details="")
        with pytest.raises(ValueError):
            get_reviewer(descriptor, "key")
