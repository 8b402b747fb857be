from __future__ import annotations

import logging

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from cr_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)


class OpenAIReviewer(BaseReviewer):
    MODEL = "gpt-4o"
    TEMPERATURE = 0.2
    TIMEOUT = 120.0

    def __init__(self, api_key: str | None = None, model: str | None = None):
        super().__init__(api_key, model)
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for GPT models. Install it with: pip install 'cr-review[openai]'"
            )
        # Retries happen in _call_with_retry only.
        self.client = _OpenAI(api_key=api_key, max_retries=0, timeout=self.TIMEOUT) if api_key else None

    def close(self) -> None:
        if self.client is not None:
            self.client.close()

    def _call_api(self, instruction: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": instruction}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning("%s stopped at %d tokens; the review may be cut short.", self.model, self.MAX_TOKENS)
        return choice.message.content or ""
