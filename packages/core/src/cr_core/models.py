"""Supported review models.

Adding a model is a data change: append a ModelDescriptor to ``_DESCRIPTORS``.
The ``provider`` field selects the client implementation in
``cr_core.reviewer.get_reviewer``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"


@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    provider: str  # "gemini" | "anthropic" | "openai"
    label: str
    description: str
    details: str
    capabilities: tuple[str, ...] = field(default_factory=tuple)
    use_cases: tuple[str, ...] = field(default_factory=tuple)


_DESCRIPTORS = (
    ModelDescriptor(
        id="gemini-2.0-flash",
        provider="gemini",
        label="Gemini 2.0 Flash (faster, more efficient)",
        description="A faster, more efficient model for code review",
        details="Optimized for speed and efficiency, good for most code review tasks",
        capabilities=(
            "Optimized for speed and efficiency",
            "Good balance between performance and quality",
            "Suitable for most code review tasks",
        ),
        use_cases=("Quick code reviews", "Syntax and style checking", "Basic security analysis"),
    ),
    ModelDescriptor(
        id="gemini-1.5-flash",
        provider="gemini",
        label="Gemini 1.5 Flash (balanced performance)",
        description="A balanced performance model for code review",
        details="Good balance of capabilities, suitable for general code review",
        capabilities=(
            "Balanced performance characteristics",
            "Good for general code review",
            "Efficient for medium-sized codebases",
        ),
        use_cases=("General code reviews", "Best practices analysis", "Code structure suggestions"),
    ),
    ModelDescriptor(
        id="gemini-2.5-flash-preview-04-17",
        provider="gemini",
        label="Gemini 2.5 Flash Preview (latest preview model)",
        description="The latest preview model with advanced capabilities",
        details="Cutting-edge features, best for complex code analysis",
        capabilities=(
            "Cutting-edge AI capabilities",
            "Advanced code understanding",
            "Preview of upcoming features",
        ),
        use_cases=("Complex code analysis", "Advanced security reviews", "Architectural suggestions"),
    ),
    ModelDescriptor(
        id="claude-sonnet-4-20250514",
        provider="anthropic",
        label="Claude Sonnet 4 (thorough reasoning)",
        description="Anthropic's Claude Sonnet 4 for in-depth review",
        details="Strong at explaining issues and proposing concrete fixes",
        capabilities=(
            "Detailed explanations of findings",
            "Good at spotting logic errors",
            "Follows formatting instructions closely",
        ),
        use_cases=("In-depth code reviews", "Refactoring suggestions", "Security-sensitive changes"),
    ),
    ModelDescriptor(
        id="gpt-4o",
        provider="openai",
        label="GPT-4o (general purpose)",
        description="OpenAI's GPT-4o general purpose model",
        details="Well-rounded reviewer across many languages",
        capabilities=(
            "Broad language coverage",
            "Consistent structured output",
            "Fast turnaround for medium diffs",
        ),
        use_cases=("General code reviews", "Polyglot repositories", "Documentation changes"),
    ),
)

MODELS: dict[str, ModelDescriptor] = {d.id: d for d in _DESCRIPTORS}


def get_model(model_id: str) -> ModelDescriptor | None:
    return MODELS.get(model_id)


def resolve_model(model_id: str | None) -> ModelDescriptor:
    """Return the descriptor for ``model_id``, falling back to the default model.

    Unknown identifiers are logged and replaced rather than rejected so a stale
    config file never blocks a review.
    """
    if not model_id:
        return MODELS[DEFAULT_MODEL]
    descriptor = MODELS.get(model_id)
    if descriptor is None:
        logger.warning("Model %s not supported. Falling back to %s.", model_id, DEFAULT_MODEL)
        return MODELS[DEFAULT_MODEL]
    return descriptor
