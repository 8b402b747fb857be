"""Tests for instruction text construction."""

import re

from cr_core.models import MODELS
from cr_core.prompts import (
    CODE_BLOCK_END,
    CODE_BLOCK_START,
    DEFAULT_INSTRUCTION,
    NO_CREDENTIAL_PREFIX,
    ReviewMode,
    ReviewRequest,
    build_fallback_message,
    build_prompt,
    section_headers,
)

FULL_HEADERS = ["SUMMARY:", "ISSUES:", "SUGGESTIONS:", "BEST PRACTICES:", "SECURITY:", "PERFORMANCE:", "CONCLUSION:"]
DIFF = "@@ -1 +1 @@\n-x=1\n+x=2"


def _headers_at_line_start(prompt: str) -> list[str]:
    pattern = re.compile(r"^(" + "|".join(re.escape(h) for h in FULL_HEADERS) + r")$", re.MULTILINE)
    return pattern.findall(prompt)


class TestSectionHeaders:
    def test_full_mode_emits_all_seven_in_order_once(self):
        prompt = build_prompt(DIFF, [], ReviewMode.FULL)
        assert _headers_at_line_start(prompt) == FULL_HEADERS
        for header in FULL_HEADERS:
            assert prompt.count(header) == 1

    def test_light_mode_emits_only_issues_and_best_practices(self):
        prompt = build_prompt(DIFF, [], ReviewMode.LIGHT)
        assert _headers_at_line_start(prompt) == ["ISSUES:", "BEST PRACTICES:"]
        for header in ("SUMMARY:", "SECURITY:", "PERFORMANCE:", "CONCLUSION:", "SUGGESTIONS:"):
            assert header not in prompt

    def test_section_headers_helper(self):
        assert list(section_headers(ReviewMode.FULL)) == FULL_HEADERS
        assert section_headers(ReviewMode.LIGHT) == ("ISSUES:", "BEST PRACTICES:")

    def test_mode_from_config(self):
        assert ReviewMode.from_config({"light_review": True}) is ReviewMode.LIGHT
        assert ReviewMode.from_config({}) is ReviewMode.FULL


class TestPromptContent:
    def test_rules_rendered_as_bullets(self):
        prompt = build_prompt(DIFF, ["Check error handling", "No print statements"])
        assert "- Check error handling\n- No print statements" in prompt

    def test_no_rules_block_without_rules(self):
        assert "Please check for the following" not in build_prompt(DIFF, [])

    def test_diff_fenced_once_at_end(self):
        prompt = build_prompt(DIFF, [])
        assert prompt.rstrip().endswith(f"```\n{DIFF}\n```")
        assert prompt.count("```") == 2

    def test_forbids_asterisks_and_reserved_markers(self):
        prompt = build_prompt(DIFF, [])
        assert "DO NOT use any asterisks" in prompt
        assert CODE_BLOCK_START in prompt
        assert CODE_BLOCK_END in prompt

    def test_custom_instruction_first(self):
        prompt = build_prompt(DIFF, [], instruction="Focus on SQL injection.")
        assert prompt.startswith("Focus on SQL injection.")

    def test_default_instruction_when_missing(self):
        assert build_prompt(DIFF, [], instruction="").startswith(DEFAULT_INSTRUCTION)

    def test_deterministic(self):
        assert build_prompt(DIFF, ["a"], ReviewMode.LIGHT) == build_prompt(DIFF, ["a"], ReviewMode.LIGHT)


class TestReviewRequest:
    def test_to_prompt_matches_build_prompt(self):
        request = ReviewRequest(diff_text=DIFF, rules=("r1",), instruction="Check it.", mode=ReviewMode.LIGHT)
        assert request.to_prompt() == build_prompt(DIFF, ("r1",), ReviewMode.LIGHT, "Check it.")


class TestFallbackMessage:
    def test_starts_with_sentinel_prefix(self):
        assert build_fallback_message(DIFF).startswith(NO_CREDENTIAL_PREFIX)

    def test_contains_line_and_character_counts(self):
        message = build_fallback_message(DIFF)
        assert "approximately 3 lines with 21 characters" in message

    def test_names_provider_env_var(self):
        message = build_fallback_message(DIFF, MODELS["gpt-4o"])
        assert "OPENAI_API_KEY" in message
