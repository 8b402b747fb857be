from __future__ import annotations

import httpx

from cr_core.providers.base import APIStatusError, BaseReviewer


class GeminiReviewer(BaseReviewer):
    MODEL = "gemini-2.0-flash"
    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    TEMPERATURE = 0.2
    TOP_P = 0.8
    TOP_K = 40
    TIMEOUT = 120.0

    def __init__(self, api_key: str | None = None, model: str | None = None, client: httpx.Client | None = None):
        super().__init__(api_key, model)
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=self.TIMEOUT)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _call_api(self, instruction: str) -> str:
        response = self.client.post(
            self.API_URL.format(model=self.model),
            headers={"x-goog-api-key": self.api_key},
            json={
                "contents": [{"parts": [{"text": instruction}]}],
                "generationConfig": {
                    "temperature": self.TEMPERATURE,
                    "topP": self.TOP_P,
                    "topK": self.TOP_K,
                    "maxOutputTokens": self.MAX_TOKENS,
                },
            },
        )
        if response.is_error:
            raise APIStatusError(f"API error: {_error_message(response)}", response.status_code)

        data = response.json()
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise RuntimeError("Unexpected API response format")


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.reason_phrase or f"HTTP {response.status_code}"
