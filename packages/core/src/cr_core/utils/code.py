from __future__ import annotations

from pathlib import PurePosixPath

# Extension → label shown next to each changed file. Anything listed here is
# treated as reviewable text; everything else is assumed to be binary.
LANGUAGE_LABELS = {
    ".js": "JavaScript",
    ".jsx": "JavaScript (React)",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript (React)",
    ".py": "Python",
    ".pyi": "Python",
    ".java": "Java",
    ".kt": "Kotlin",
    ".scala": "Scala",
    ".c": "C",
    ".cpp": "C++",
    ".cc": "C++",
    ".h": "C/C++ Header",
    ".hpp": "C++ Header",
    ".cs": "C#",
    ".go": "Go",
    ".rs": "Rust",
    ".rb": "Ruby",
    ".php": "PHP",
    ".swift": "Swift",
    ".sh": "Shell",
    ".sql": "SQL",
    ".html": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".vue": "Vue",
    ".json": "JSON",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".toml": "TOML",
    ".ini": "INI",
    ".xml": "XML",
    ".md": "Markdown",
    ".rst": "reStructuredText",
    ".txt": "Text",
}

TEXT_SOURCE_EXTENSIONS = frozenset(LANGUAGE_LABELS)


def _suffix(file_name: str) -> str:
    return PurePosixPath(file_name).suffix.lower()


def _normalize(extensions) -> set[str]:
    return {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions or ()}


def is_text_source(file_name: str, extra_extensions=None) -> bool:
    """Return True if the file extension is on the reviewable-text allow-list.

    ``extra_extensions`` extends the built-in list; entries may be given with
    or without the leading dot (``"proto"`` or ``".proto"``).
    """
    suffix = _suffix(file_name)
    if not suffix:
        return False
    return suffix in TEXT_SOURCE_EXTENSIONS or suffix in _normalize(extra_extensions)


def language_label(file_name: str) -> str:
    return LANGUAGE_LABELS.get(_suffix(file_name), "Unknown")
