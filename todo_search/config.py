"""Configuration management for todo-search."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import tomli_w

from todo_search.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from todo_search.search.dates import WEEK_STARTS
from todo_search.search.evaluator import EvaluationSettings
from todo_search.search.keywords import (
    KEYWORD_GROUPS,
    PRIORITY_SYNONYMS,
    KeywordSets,
    priority_synonyms,
)
from todo_search.utils.fileops import secure_mkdir, secure_write_text


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "todo-search" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        tasks_file: Default JSON task export used when ``--tasks`` is omitted.
        case_sensitive: Match free text case-sensitively by default.
        week_starts_on: First day of the week, ``monday`` or ``sunday``.
        strict: Fail on unknown fields and bad dates instead of not matching.
        colored_output: Whether to use colored terminal output.
        keywords: Extra state keywords per group (``active``, ``inactive``,
            ``waiting``, ``completed``, ``archived``).
        priority: Extra spellings per priority (``high``, ``med``, ``low``).
        config_path: Path where config was loaded from (None if defaults).
    """

    tasks_file: Path | None = None
    case_sensitive: bool = False
    week_starts_on: str = "monday"
    strict: bool = False
    colored_output: bool = True
    keywords: dict[str, list[str]] = field(default_factory=dict)
    priority: dict[str, list[str]] = field(default_factory=dict)
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if self.tasks_file is not None:
            self.tasks_file = self.tasks_file.expanduser().resolve()
            if not self.tasks_file.exists():
                warnings.append(f"Tasks file not found: {self.tasks_file}")

        if self.week_starts_on not in WEEK_STARTS:
            raise ConfigValidationError(
                "search.week_starts_on", self.week_starts_on, "must be 'monday' or 'sunday'"
            )

        builtin = KeywordSets()
        for group, words in self.keywords.items():
            for word in words:
                owner = builtin.group_of(word)
                if owner is not None and owner != group:
                    warnings.append(
                        f"keywords.{group}: '{word}' is already a builtin {owner} keyword"
                    )

        return warnings

    def to_settings(self, reference_date: date | None = None) -> EvaluationSettings:
        """Build evaluation settings from this configuration."""
        return EvaluationSettings(
            keywords=KeywordSets.from_additional(self.keywords),
            priority_synonyms=priority_synonyms(self.priority),
            week_starts_on=self.week_starts_on,
            reference_date=reference_date,
            strict=self.strict,
        )


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    config_path = (config_path or get_default_config_path()).expanduser().resolve()

    if not config_path.is_file():
        config = Config()
        notice = (
            f"No config file found at {config_path}. Using defaults. "
            "Create one with: todo-search init-config"
        )
        return config, [notice, *config.validate()]

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(config_path, f"cannot read file: {e}") from e

    config = _parse_config_dict(data, config_path)
    return config, config.validate()


def _parse_word_lists(
    section: dict[str, Any], name: str, allowed: tuple[str, ...]
) -> dict[str, list[str]]:
    """Parse a section mapping names to lists of strings."""
    result: dict[str, list[str]] = {}
    for key, value in section.items():
        if key not in allowed:
            raise ConfigValidationError(
                f"{name}.{key}", value, f"must be one of: {', '.join(allowed)}"
            )
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigValidationError(f"{name}.{key}", value, "must be a list of strings")
        result[key] = list(value)
    return result


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [paths] section
    paths = data.get("paths", {})
    if "tasks_file" in paths:
        value = paths["tasks_file"]
        if not isinstance(value, str):
            raise ConfigValidationError("paths.tasks_file", value, "must be a string path")
        config.tasks_file = Path(value)

    # Parse [search] section
    search = data.get("search", {})
    if "case_sensitive" in search:
        value = search["case_sensitive"]
        if not isinstance(value, bool):
            raise ConfigValidationError("search.case_sensitive", value, "must be a boolean")
        config.case_sensitive = value

    if "week_starts_on" in search:
        value = search["week_starts_on"]
        if not isinstance(value, str):
            raise ConfigValidationError("search.week_starts_on", value, "must be a string")
        config.week_starts_on = value.lower()

    if "strict" in search:
        value = search["strict"]
        if not isinstance(value, bool):
            raise ConfigValidationError("search.strict", value, "must be a boolean")
        config.strict = value

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    # Parse [keywords] and [priority] sections
    config.keywords = _parse_word_lists(data.get("keywords", {}), "keywords", KEYWORD_GROUPS)
    config.priority = _parse_word_lists(
        data.get("priority", {}), "priority", tuple(PRIORITY_SYNONYMS)
    )

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    config_path = (config_path or config.config_path or get_default_config_path()).expanduser()

    data: dict[str, Any] = {
        "search": {
            "case_sensitive": config.case_sensitive,
            "week_starts_on": config.week_starts_on,
            "strict": config.strict,
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    if config.tasks_file is not None:
        data["paths"] = {"tasks_file": str(config.tasks_file)}

    # Only non-empty keyword/priority lists
    keywords = {group: words for group, words in config.keywords.items() if words}
    if keywords:
        data["keywords"] = keywords

    priority = {name: words for name, words in config.priority.items() if words}
    if priority:
        data["priority"] = priority

    secure_mkdir(config_path.parent)
    secure_write_text(config_path, tomli_w.dumps(data))
