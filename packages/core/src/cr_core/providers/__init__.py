from cr_core.providers.base import BaseReviewer, FailureKind, ReviewResult

__all__ = ["BaseReviewer", "FailureKind", "ReviewResult"]
