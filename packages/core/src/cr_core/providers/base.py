"""Base reviewer implementing the Template Method pattern.

All providers share the same call sequence:
    send() → credential check
           → _call_with_retry() → _call_api()   ← only this differs per provider
           → ReviewResult

Subclasses implement two things only:
  - __init__: validate and store the SDK/HTTP client
  - _call_api: make one raw API call and return the text response

The prompt itself is built by ``cr_core.prompts`` and arrives here as a single
string; providers never look inside it.
"""

from __future__ import annotations

import enum
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Shared defaults; subclasses may override them as class attributes.
_MAX_RETRIES = 3
_MAX_TOKENS = 2048


class APIStatusError(RuntimeError):
    """A provider answered with an HTTP error status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


def _is_retryable(error: Exception) -> bool:
    # SDK status errors carry status_code as well. Of the 4xx codes only 429 is retried.
    status = getattr(error, "status_code", None)
    if isinstance(status, int) and 400 <= status < 500:
        return status == 429
    return True


class FailureKind(str, enum.Enum):
    NO_CREDENTIAL = "no_credential"
    API_ERROR = "api_error"
    EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of one remote review call: either ``text`` or a failure ``reason``."""

    text: str = ""
    reason: str | None = None
    kind: FailureKind | None = None

    @classmethod
    def success(cls, text: str) -> ReviewResult:
        return cls(text=text)

    @classmethod
    def failure(cls, reason: str, kind: FailureKind = FailureKind.API_ERROR) -> ReviewResult:
        return cls(reason=reason, kind=kind)

    @property
    def ok(self) -> bool:
        return self.kind is None

    @property
    def credential_missing(self) -> bool:
        return self.kind is FailureKind.NO_CREDENTIAL


class BaseReviewer(ABC):
    MODEL: str = ""
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS
    TEMPERATURE: float = 0.2

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key
        self.model = model or self.MODEL

    def close(self) -> None:
        """Release any connection the reviewer opened itself."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def send(self, instruction: str) -> ReviewResult:
        """Send one instruction string and return the model's raw text.

        Never raises for transport or API problems: those come back as a
        failed ReviewResult so the caller can report the file and move on.
        """
        if not self.api_key:
            return ReviewResult.failure(
                f"No API key configured for {self.__class__.__name__}.",
                FailureKind.NO_CREDENTIAL,
            )
        try:
            raw = self._call_with_retry(instruction)
        except Exception as e:
            return ReviewResult.failure(str(e) or e.__class__.__name__)
        if not raw or not raw.strip():
            return ReviewResult.failure("The model returned an empty response.", FailureKind.EMPTY_RESPONSE)
        return ReviewResult.success(raw)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, instruction: str) -> str:
        """Make a single API call and return the raw text response.

        This is the only method subclasses must implement. It should raise
        on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, instruction: str) -> str:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff.

        Client errors other than 429 are re-raised at once, and the last
        exception is re-raised once attempts are exhausted.
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(instruction)
            except Exception as e:
                if not _is_retryable(e):
                    logger.error("%s API rejected the request: %s", self.__class__.__name__, e)
                    raise
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise RuntimeError("MAX_RETRIES must be at least 1")
