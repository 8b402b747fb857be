"""Instruction text sent to the review model.

The section headers below are a contract with the renderer: the model is told
to use them verbatim, at the start of a line, and ``cr_core.render`` relies on
that shape to recognise and colour them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cr_core.models import ModelDescriptor

DEFAULT_INSTRUCTION = "Review this code for bugs, security issues, and best practices."

LIGHT_SECTIONS = (
    ("ISSUES:", "List any issues, bugs, or errors found in the code (if any)"),
    ("BEST PRACTICES:", "Note any best practices that should be followed or improvements that could be made"),
)

FULL_SECTIONS = (
    ("SUMMARY:", "A brief summary of the changes"),
    ("ISSUES:", "List any issues or bugs found (if any)"),
    ("SUGGESTIONS:", "Provide suggestions for improvements (if any)"),
    ("BEST PRACTICES:", "Note any best practices that should be followed"),
    ("SECURITY:", "Mention any security concerns (if applicable)"),
    ("PERFORMANCE:", "Note any performance considerations (if applicable)"),
    ("CONCLUSION:", "A brief conclusion"),
)

# Reserved lines the renderer draws around extracted code blocks.
CODE_BLOCK_START = "--- Code Block ---"
CODE_BLOCK_END = "--- End Code Block ---"

# Texts starting with these prefixes are final messages and bypass rendering.
ERROR_PREFIX = "Error reviewing code:"
NO_CREDENTIAL_PREFIX = "⚠️ No API key found"


class ReviewMode(str, enum.Enum):
    FULL = "full"
    LIGHT = "light"

    @classmethod
    def from_config(cls, config: dict) -> ReviewMode:
        return cls.LIGHT if config.get("light_review") else cls.FULL


def section_headers(mode: ReviewMode) -> tuple[str, ...]:
    sections = LIGHT_SECTIONS if mode is ReviewMode.LIGHT else FULL_SECTIONS
    return tuple(header for header, _ in sections)


def _formatting_rules(mode: ReviewMode) -> str:
    if mode is ReviewMode.LIGHT:
        missing = '- If a section doesn\'t apply (e.g., no issues found), still include the header but note "No issues found."'
    else:
        missing = "- If a section doesn't apply, you can skip it entirely."
    return f"""IMPORTANT:
- DO NOT use any asterisks (*) or markdown formatting in your response.
- DO NOT use **, *, or any other markdown syntax. Use plain text only.
- For bullet points, use - instead of *. For emphasis, use ALL CAPS instead of asterisks.
- ALWAYS use the EXACT section headers listed above (in ALL CAPS followed by a colon).
{missing}
- Do not write lines containing "{CODE_BLOCK_START}" or "{CODE_BLOCK_END}"; they are reserved for formatting.
"""


def build_prompt(
    diff: str,
    rules=(),
    mode: ReviewMode = ReviewMode.FULL,
    instruction: str | None = None,
) -> str:
    """Build the full instruction text for one file's diff.

    Pure and deterministic: the same arguments always produce the same string.
    """
    parts = [f"{instruction or DEFAULT_INSTRUCTION}\n"]

    if rules:
        parts.append("Please check for the following:")
        parts.extend(f"- {rule}" for rule in rules)
        parts.append("")

    if mode is ReviewMode.LIGHT:
        parts.append("Please provide a focused code review with ONLY these two sections:\n")
        sections = LIGHT_SECTIONS
    else:
        parts.append("Please format your response with clear section headers for better readability.")
        parts.append("Use the following structure with EXACTLY these section headers:\n")
        sections = FULL_SECTIONS

    for header, description in sections:
        parts.append(header)
        parts.append(f"{description}\n")

    parts.append("Include code examples where appropriate using triple backticks.\n")
    parts.append(_formatting_rules(mode))
    parts.append("Here is the code diff to review:\n")
    parts.append(f"```\n{diff}\n```\n")
    return "\n".join(parts)


@dataclass(frozen=True)
class ReviewRequest:
    diff_text: str
    rules: tuple[str, ...] = field(default_factory=tuple)
    instruction: str = DEFAULT_INSTRUCTION
    mode: ReviewMode = ReviewMode.FULL

    def to_prompt(self) -> str:
        return build_prompt(self.diff_text, self.rules, self.mode, self.instruction)


def build_fallback_message(diff: str, descriptor: ModelDescriptor | None = None) -> str:
    """Basic statistics shown instead of a review when no API key is configured."""
    provider = descriptor.provider if descriptor else "gemini"
    env_var = f"{provider.upper()}_API_KEY"
    line_count = len(diff.split("\n"))
    return f"""{NO_CREDENTIAL_PREFIX}

Please add your API key to .cr.yml (api_key) or set the {env_var} environment variable.

For now, here's a basic analysis:

Summary:
The code contains approximately {line_count} lines with {len(diff)} characters.

Recommendation:
To get a detailed code review, configure your API key:
- Add it to .cr.yml as api_key
- Or set the {env_var} environment variable
"""
