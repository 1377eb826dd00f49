"""Exception hierarchy for todo-search."""

from pathlib import Path


class TodoSearchError(Exception):
    """Root of every error raised by todo-search.

    The CLI catches subclasses to choose an exit status; library callers
    can catch this one class instead.
    """

    pass


# Configuration Errors
class ConfigError(TodoSearchError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Task file Errors
class TaskFileError(TodoSearchError):
    """Task export file is missing or malformed."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Cannot load tasks from {path}: {detail}")


# Search Errors
class SearchError(TodoSearchError):
    """Errors raised while parsing or evaluating a search query."""

    pass


class SearchSyntaxError(SearchError):
    """The query is structurally invalid.

    Raised by the parser for unmatched parentheses, dangling prefixes,
    misplaced range operators and empty input. ``position`` is the
    zero-based character offset of the offending token.
    """

    def __init__(self, message: str, position: int, query: str | None = None) -> None:
        self.message = message
        self.position = position
        self.query = query
        super().__init__(f"{message} (at position {position})")


class EvaluationError(SearchError):
    """A well-formed query cannot be applied to a task.

    Raised for unknown filter fields and, in strict mode, for date
    values that do not parse.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)
