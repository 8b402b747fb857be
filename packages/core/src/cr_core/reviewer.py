"""Core review orchestration for uncommitted changes."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from cr_core.display import (
    make_console,
    print_divider,
    print_error,
    print_info,
    print_list_item,
    print_section_header,
    print_subsection_header,
    print_success,
    print_warning,
)
from cr_core.git import ChangeRecord, DiffCollector, GitCommandError, NotARepositoryError
from cr_core.models import ModelDescriptor, get_model, resolve_model
from cr_core.prompts import ReviewMode, ReviewRequest, build_fallback_message
from cr_core.providers.anthropic import AnthropicReviewer
from cr_core.providers.base import BaseReviewer
from cr_core.providers.gemini import GeminiReviewer
from cr_core.providers.openai import OpenAIReviewer
from cr_core.render import RenderOptions, SectionCategory, is_sentinel, render_text, split_sections
from cr_core.utils.code import is_text_source, language_label

logger = logging.getLogger(__name__)

_PROVIDERS = {
    "gemini": GeminiReviewer,
    "anthropic": AnthropicReviewer,
    "openai": OpenAIReviewer,
}


class FileStatus(str, enum.Enum):
    REVIEWED = "reviewed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FileOutcome:
    path: str
    status: FileStatus
    reason: str = ""
    # Categories of the headed sections in the printed review, in order.
    sections: tuple[SectionCategory, ...] = ()


@dataclass
class ReviewSummary:
    """Result returned by run_changes_review, one outcome per discovered file."""

    model: str
    total: int = 0
    outcomes: list[FileOutcome] = field(default_factory=list)

    def _count(self, status: FileStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def reviewed(self) -> int:
        return self._count(FileStatus.REVIEWED)

    @property
    def skipped(self) -> int:
        return self._count(FileStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(FileStatus.FAILED)


def get_reviewer(descriptor: ModelDescriptor, api_key: str | None) -> BaseReviewer:
    provider = _PROVIDERS.get(descriptor.provider)
    if provider is None:
        raise ValueError(f"Unknown model provider: {descriptor.provider!r}.")
    return provider(api_key=api_key, model=descriptor.id)


def _truncate(diff: str, max_chars: int) -> str:
    if max_chars and len(diff) > max_chars:
        return diff[:max_chars] + "\n... [diff truncated]"
    return diff


def print_review(console: Console, review: Text) -> None:
    """Print rendered review text between two full-width dividers."""
    print_divider(console)
    console.print()
    console.print(review, soft_wrap=True)
    console.print()
    print_divider(console)


def print_changed_files(console: Console, changes: list[ChangeRecord]) -> None:
    print_subsection_header(console, f"Found {len(changes)} Changed Files")
    for change in changes:
        console.print(
            f"  [green]•[/green] [italic cyan]{escape(change.path)}[/italic cyan] "
            f"[dim]({language_label(change.path)}, {change.kind.value})[/dim]"
        )
    console.print()


def review_file(
    change: ChangeRecord,
    collector: DiffCollector,
    reviewer: BaseReviewer,
    config: dict,
    descriptor: ModelDescriptor,
    console: Console,
    options: RenderOptions,
) -> FileOutcome:
    """Review one changed file and print the result.

    Exceptions from diff retrieval propagate; run_changes_review turns them
    into a FAILED outcome.
    """
    path = change.path
    if not is_text_source(path, config.get("text_extensions")):
        print_warning(console, f"Skipping likely binary file: {path}")
        return FileOutcome(path, FileStatus.SKIPPED, "likely binary")

    diff = collector.get_diff(path)
    if not diff:
        print_warning(console, f"No diff available for {path}")
        return FileOutcome(path, FileStatus.SKIPPED, "no diff")

    print_subsection_header(console, f"Reviewing {PurePosixPath(path).name}")
    print_list_item(console, "File", path)
    print_list_item(console, "Changes", f"{len(diff.splitlines())} lines")
    console.print()

    request = ReviewRequest(
        diff_text=_truncate(diff, config.get("max_chars_per_file", 0)),
        rules=tuple(config.get("rules") or ()),
        instruction=config.get("instruction") or "",
        mode=ReviewMode.from_config(config),
    )
    result = reviewer.send(request.to_prompt())

    if result.credential_missing:
        review = build_fallback_message(diff, descriptor)
    elif not result.ok:
        logger.warning("Review of %s failed: %s", path, result.reason)
        print_error(console, f"Error processing {path}:", result.reason)
        return FileOutcome(path, FileStatus.FAILED, result.reason or "")
    else:
        review = result.text

    rendered = render_text(review, options)
    sections = ()
    if not is_sentinel(review):
        sections = tuple(s.category for s in split_sections(rendered.plain) if s.header_text)
    if not sections:
        logger.debug("%s: review has no recognised section headers", path)
    print_review(console, rendered)
    return FileOutcome(path, FileStatus.REVIEWED, sections=sections)


def print_summary(console: Console, summary: ReviewSummary) -> None:
    print_section_header(console, "Review Summary", "Results of code review")
    print_list_item(console, "Files reviewed", f"{summary.reviewed}/{summary.total}")
    print_list_item(console, "Files skipped", str(summary.skipped))
    if summary.failed:
        print_list_item(console, "Files failed", str(summary.failed))
    print_list_item(console, "Model used", summary.model, highlight=True)
    console.print()
    if summary.failed:
        print_warning(console, f"Code review completed with {summary.failed} failed file(s).")
    else:
        print_success(console, "Code review completed successfully!")


def run_changes_review(
    config: dict | None,
    repo_root: str = ".",
    console: Console | None = None,
    collector: DiffCollector | None = None,
    reviewer: BaseReviewer | None = None,
) -> ReviewSummary | None:
    """Review every uncommitted change in ``repo_root`` and return a ReviewSummary.

    Returns None only when a precondition fails (no configuration, not a git
    repository, provider SDK missing); nothing is reviewed in that case.
    Files are processed one at a time in discovery order so the console output
    follows the changed-file listing.
    """
    if console is None:
        console = make_console(config.get("use_colors", True) if config else True)

    print_section_header(console, "Code Review", "Reviewing changes in your git repository")

    if config is None:
        print_warning(console, 'CR configuration not found. Run "cr init" first.')
        return None

    collector = collector or DiffCollector(repo_root)
    print_info(console, "Checking for changes in your repository...")
    try:
        changes = collector.list_changes()
    except NotARepositoryError as e:
        logger.debug("Precondition failed: %s", e)
        print_error(console, "Not a git repository. Please run this command in a git repository.")
        return None
    except GitCommandError as e:
        print_error(console, "Could not read repository status.", str(e))
        return None

    model_id = config.get("model")
    descriptor = resolve_model(model_id)
    if model_id and get_model(model_id) is None:
        print_warning(console, f"Model {model_id} not supported. Falling back to {descriptor.id}.")

    if reviewer is not None:
        return _review_changes(changes, collector, reviewer, config, descriptor, console)
    try:
        reviewer = get_reviewer(descriptor, config.get("resolved_api_key"))
    except ImportError as e:
        print_error(console, str(e))
        return None
    with reviewer:
        return _review_changes(changes, collector, reviewer, config, descriptor, console)


def _review_changes(
    changes: list[ChangeRecord],
    collector: DiffCollector,
    reviewer: BaseReviewer,
    config: dict,
    descriptor: ModelDescriptor,
    console: Console,
) -> ReviewSummary:
    summary = ReviewSummary(model=descriptor.id, total=len(changes))
    if not changes:
        print_warning(console, "No changed files found in your repository.")
        print_info(console, "Make some changes and try again, or commit your current changes.")
        return summary

    print_changed_files(console, changes)
    print_info(console, f"Using model: {descriptor.id}")
    print_divider(console)

    options = RenderOptions(color=config.get("use_colors", True), width=console.width)

    for change in changes:
        try:
            outcome = review_file(change, collector, reviewer, config, descriptor, console, options)
        except Exception as e:
            logger.warning("Error processing %s: %s", change.path, e)
            print_error(console, f"Error processing {change.path}:", str(e))
            outcome = FileOutcome(change.path, FileStatus.FAILED, str(e))
        summary.outcomes.append(outcome)

    print_summary(console, summary)
    return summary
