import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from cr_core.models import DEFAULT_MODEL, resolve_model
from cr_core.prompts import DEFAULT_INSTRUCTION

logger = logging.getLogger(__name__)

CONFIG_FILE = ".cr.yml"

DEFAULT_CONFIG: dict = {
    "model": DEFAULT_MODEL,
    "instruction": DEFAULT_INSTRUCTION,
    "rules": [],
    "light_review": False,
    "use_colors": True,
    "max_chars_per_file": 20000,
    "text_extensions": [],  # extra extensions to treat as reviewable text, e.g. ["proto", ".tf"]
    "api_key": None,  # None = resolve from the provider's environment variable
}

DEFAULT_RULES = [
    "Check for security vulnerabilities",
    "Ensure proper error handling",
    "Verify code follows best practices",
]

# Keys from the older CR.json layout, mapped onto their current names.
_LEGACY_KEYS = {
    "model_name": "model",
    "prompt": "instruction",
    "gemini_api_key": "api_key",
}

_PROVIDER_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

# Filled in at load time; never written back to disk.
_RUNTIME_KEYS = ("resolved_api_key",)


def _apply_legacy_keys(file_config: dict) -> dict:
    migrated = dict(file_config)
    for old, new in _LEGACY_KEYS.items():
        if old in migrated:
            value = migrated.pop(old)
            migrated.setdefault(new, value)
    return migrated


def resolve_api_key(config: dict) -> Optional[str]:
    """Return the API key for the configured model's provider.

    A non-empty ``api_key`` in the config file wins; otherwise the provider's
    environment variable (GEMINI_API_KEY, ANTHROPIC_API_KEY, OPENAI_API_KEY).
    """
    if config.get("api_key"):
        return config["api_key"]
    provider = resolve_model(config.get("model")).provider
    return os.environ.get(_PROVIDER_ENV_VARS[provider]) or None


def load_config(config_path: str = CONFIG_FILE, cli_overrides: Optional[dict] = None) -> Optional[dict]:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .cr.yml in the current directory
      3. CLI argument overrides

    Returns None when the config file does not exist; reviews require an
    explicit ``cr init`` first.
    """
    path = Path(config_path)
    if not path.exists():
        logger.debug("No configuration file at %s", path)
        return None

    config = {**DEFAULT_CONFIG, "rules": list(DEFAULT_CONFIG["rules"]), "text_extensions": []}

    with open(path, encoding="utf-8") as f:
        file_config = yaml.safe_load(f) or {}
    if not isinstance(file_config, dict):
        raise yaml.YAMLError(f"{config_path} must contain a mapping of options.")
    config.update(_apply_legacy_keys(file_config))

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    rules = config.get("rules") or []
    if isinstance(rules, str):
        rules = [rules]
    config["rules"] = [str(rule) for rule in rules]
    config["resolved_api_key"] = resolve_api_key(config)
    return config


def save_config(config: dict, config_path: str = CONFIG_FILE) -> None:
    """Write ``config`` to ``config_path`` as YAML, dropping runtime-only keys."""
    data = {k: v for k, v in config.items() if k not in _RUNTIME_KEYS}
    Path(config_path).write_text(yaml.dump(data, default_flow_style=False, sort_keys=False), encoding="utf-8")
