"""Turn a model's free-text review into readable terminal output.

The model is asked for plain text with fixed ALL-CAPS section headers, but
responses still arrive with markdown artifacts: bold/italic markers, ``#``
headings, fenced code blocks and inline backticks. This module strips the
artifacts, frames code blocks with marker lines and colours section headers.

Styling is carried as spans on a ``rich.text.Text``; the characters of the
output never depend on whether colour is enabled, only the spans do.
"""

from __future__ import annotations

import enum
import io
import re
from dataclasses import dataclass, field

from rich.console import Console
from rich.text import Text

from cr_core.prompts import CODE_BLOCK_END, ERROR_PREFIX, NO_CREDENTIAL_PREFIX

# Fences open and close at line start; list items often indent both.
_FENCE_RE = re.compile(r"^([ \t]*)```([\w+#.-]*)[ \t]*\n(.*?)^[ \t]*```", re.DOTALL | re.MULTILINE)
_HEADING_RE = re.compile(r"^#+[ \t]+")
_BULLET_RE = re.compile(r"^([ \t]*)\*(?=\s)")
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
# Asterisk bold only; "__x__" is left alone so dunder names survive.
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
# Underscore italics only count at word boundaries so snake_case survives.
_ITALIC_RE = re.compile(r"\*(?!\s)([^*\n]+?)(?<!\s)\*|(?<!\w)_(?!\s)([^_\n]+?)(?<!\s)_(?!\w)")
# A capitalised phrase ending in a colon, or an all-caps phrase, at line start.
_HEADER_RE = re.compile(r"^(?:[A-Z][A-Za-z ]*:|[A-Z]{2,}[A-Z ]*[A-Z]\b)")

_SENTINEL_PREFIXES = (ERROR_PREFIX, NO_CREDENTIAL_PREFIX)


class SectionCategory(str, enum.Enum):
    SUMMARY = "summary"
    ISSUE = "issue"
    SUGGESTION = "suggestion"
    BEST_PRACTICE = "best_practice"
    SECURITY = "security"
    PERFORMANCE = "performance"
    CONCLUSION = "conclusion"
    GENERIC = "generic"


# First match wins, so "Summary of errors" is a summary header.
_CATEGORY_KEYWORDS = (
    (SectionCategory.SUMMARY, ("summary", "overview")),
    (SectionCategory.ISSUE, ("issue", "bug", "error")),
    (SectionCategory.SUGGESTION, ("suggestion",)),
    (SectionCategory.BEST_PRACTICE, ("best practice",)),
    (SectionCategory.SECURITY, ("security",)),
    (SectionCategory.PERFORMANCE, ("performance",)),
    (SectionCategory.CONCLUSION, ("conclusion",)),
)

_DEFAULT_SECTION_STYLES = {
    SectionCategory.SUMMARY: "bold green",
    SectionCategory.ISSUE: "bold red",
}


@dataclass(frozen=True)
class RenderOptions:
    """Everything the renderer needs to know about the output terminal.

    ``section_styles`` maps header categories to rich style strings; any
    category missing from it uses ``header_style``.
    """

    color: bool = True
    width: int = 80
    code_style: str = "magenta"
    marker_style: str = "dim"
    header_style: str = "bold cyan"
    section_styles: dict = field(default_factory=lambda: dict(_DEFAULT_SECTION_STYLES))

    def style_for(self, category: SectionCategory) -> str:
        return self.section_styles.get(category, self.header_style)


@dataclass(frozen=True)
class RenderedSection:
    header_text: str
    category: SectionCategory
    body: str


def is_sentinel(raw: str) -> bool:
    """True for texts that are already final messages and must not be rendered."""
    return not raw or raw.lstrip().startswith(_SENTINEL_PREFIXES)


def categorize_header(header: str) -> SectionCategory:
    lowered = header.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return SectionCategory.GENERIC


def split_sections(text: str) -> list[RenderedSection]:
    """Split review text at header-shaped lines.

    Text before the first header becomes a GENERIC section with an empty
    header. Joining ``header_text + body`` of every section gives back
    ``text`` exactly.
    """
    sections: list[RenderedSection] = []
    header = ""
    body: list[str] = []
    for line in text.splitlines(keepends=True):
        content = line.rstrip("\r\n")
        if _HEADER_RE.match(content):
            if header or body:
                sections.append(_section(header, body))
            header, body = content, [line[len(content) :]]
        else:
            body.append(line)
    if header or body:
        sections.append(_section(header, body))
    return sections


def _section(header: str, body: list[str]) -> RenderedSection:
    category = categorize_header(header) if header else SectionCategory.GENERIC
    return RenderedSection(header_text=header, category=category, body="".join(body))


def _strip_emphasis(fragment: str) -> str:
    fragment = _BOLD_RE.sub(r"\1", fragment)
    fragment = _ITALIC_RE.sub(lambda m: m.group(1) if m.group(1) is not None else m.group(2), fragment)
    return fragment.replace("*", "")


def _render_line(line: str, options: RenderOptions) -> Text:
    line = _HEADING_RE.sub("", line)
    line = _BULLET_RE.sub(r"\1-", line)

    rendered = Text()
    code_style = options.code_style if options.color else ""
    pos = 0
    for match in _INLINE_CODE_RE.finditer(line):
        rendered.append(_strip_emphasis(line[pos : match.start()]))
        rendered.append(match.group(1), style=code_style)
        pos = match.end()
    rendered.append(_strip_emphasis(line[pos:]))

    if options.color:
        header = _HEADER_RE.match(rendered.plain)
        if header:
            rendered.stylize(options.style_for(categorize_header(header.group(0))), 0, header.end())
    return rendered


def _append_prose(text: Text, chunk: str, options: RenderOptions, after_block: bool = False) -> None:
    if not chunk:
        return
    if after_block and not chunk.startswith("\n"):
        # Text resumed on the closing fence's line; keep the end marker alone.
        text.append("\n")
    lines = chunk.split("\n")
    for i, line in enumerate(lines):
        text.append_text(_render_line(line, options))
        if i < len(lines) - 1:
            text.append("\n")


def code_block_marker(language: str = "") -> str:
    return f"--- Code Block ({language}) ---" if language else "--- Code Block ---"


def _append_code_block(text: Text, indent: str, language: str, code: str, options: RenderOptions) -> None:
    marker_style = options.marker_style if options.color else ""
    code_style = options.code_style if options.color else ""

    if text.plain and not text.plain.endswith("\n"):
        text.append("\n")
    text.append(code_block_marker(language), style=marker_style)
    text.append("\n")

    if code.endswith("\n"):
        code = code[:-1]
    if code:
        for line in code.split("\n"):
            if indent and line.startswith(indent):
                line = line[len(indent) :]
            text.append(line, style=code_style)
            text.append("\n")
    text.append(CODE_BLOCK_END, style=marker_style)


def render_text(raw: str, options: RenderOptions | None = None) -> Text:
    """Render review text into a styled ``Text`` ready for ``Console.print``."""
    options = options or RenderOptions()
    if is_sentinel(raw):
        return Text(raw)

    text = Text()
    pos = 0
    for match in _FENCE_RE.finditer(raw):
        _append_prose(text, raw[pos : match.start()], options, after_block=pos > 0)
        _append_code_block(text, match.group(1), match.group(2), match.group(3), options)
        pos = match.end()
    _append_prose(text, raw[pos:], options, after_block=pos > 0)
    return text


def render(raw: str, options: RenderOptions | None = None) -> str:
    """Render review text to a printable string.

    With colour disabled the result is plain text; with colour enabled it
    carries ANSI escape sequences. Sentinel texts come back unchanged.
    """
    options = options or RenderOptions()
    if is_sentinel(raw):
        return raw
    text = render_text(raw, options)
    if not options.color:
        return text.plain

    console = Console(
        file=io.StringIO(),
        force_terminal=True,
        color_system="standard",
        width=options.width,
        highlight=False,
        soft_wrap=True,
    )
    with console.capture() as capture:
        console.print(text, end="")
    return capture.get()
