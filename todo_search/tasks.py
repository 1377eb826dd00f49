"""Task records and the JSON task export they are loaded from."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path, PurePosixPath
from typing import Any

from todo_search.exceptions import TaskFileError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"(?<![\w#])#([\w/-]+)")

# JSON key -> Task attribute, for exports written with camelCase keys
_CAMEL_KEYS: dict[str, str] = {
    "rawText": "raw_text",
    "scheduledDate": "scheduled_date",
    "deadlineDate": "deadline_date",
}


def _parse_date(value: Any, key: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.date() if isinstance(value, datetime) else value
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be an ISO date string, got {type(value).__name__}")
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValueError(f"'{key}' is not an ISO date: {value!r}") from None


@dataclass(frozen=True)
class Task:
    """A single task line, as exported by the task scanner.

    Attributes:
        path: Vault-relative path of the file holding the task.
        raw_text: The full source line, including keyword and tags.
        text: Display text with keyword and markers removed.
        state: The task keyword, e.g. ``TODO`` or ``DONE``.
        priority: ``high``, ``med``, ``low`` or None.
        scheduled_date: SCHEDULED date, if any.
        deadline_date: DEADLINE date, if any.
        completed: Whether the task is done.
        line: Zero-based line number in the file.
    """

    path: str
    raw_text: str = ""
    text: str = ""
    state: str = ""
    priority: str | None = None
    scheduled_date: date | None = None
    deadline_date: date | None = None
    completed: bool = False
    line: int = 0

    @property
    def filename(self) -> str:
        return PurePosixPath(self.path).name if self.path else ""

    @property
    def tags(self) -> list[str]:
        """Tags found in the raw line, without the leading ``#``."""
        return _TAG_RE.findall(self.raw_text or "")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Build a task from one exported JSON object.

        Accepts camelCase or snake_case keys and ISO ``YYYY-MM-DD`` dates.

        Raises:
            ValueError: If ``path`` is missing or a field has the wrong type.
        """
        fields = {_CAMEL_KEYS.get(key, key): value for key, value in data.items()}

        path = fields.get("path")
        if not isinstance(path, str) or not path:
            raise ValueError("task is missing 'path'")

        priority = fields.get("priority")
        if priority is not None and not isinstance(priority, str):
            raise ValueError("'priority' must be a string or null")

        line = fields.get("line", 0)
        if not isinstance(line, int) or isinstance(line, bool):
            raise ValueError("'line' must be an integer")

        return cls(
            path=path,
            raw_text=str(fields.get("raw_text") or ""),
            text=str(fields.get("text") or ""),
            state=str(fields.get("state") or ""),
            priority=priority or None,
            scheduled_date=_parse_date(fields.get("scheduled_date"), "scheduledDate"),
            deadline_date=_parse_date(fields.get("deadline_date"), "deadlineDate"),
            completed=bool(fields.get("completed", False)),
            line=line,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the same shape :meth:`from_dict` reads (camelCase)."""
        return {
            "path": self.path,
            "line": self.line,
            "rawText": self.raw_text,
            "text": self.text,
            "state": self.state,
            "priority": self.priority,
            "scheduledDate": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "deadlineDate": self.deadline_date.isoformat() if self.deadline_date else None,
            "completed": self.completed,
        }


def load_tasks(path: Path) -> tuple[list[Task], dict[str, dict[str, Any]]]:
    """Load tasks and per-file properties from a JSON export.

    The file holds either a list of task objects or an object with a
    ``tasks`` list and an optional ``properties`` mapping of file path to
    property bag.

    Args:
        path: Path to the JSON file.

    Returns:
        Tuple of (tasks, properties keyed by file path).

    Raises:
        TaskFileError: If the file is missing, not JSON, or malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise TaskFileError(path, "file not found") from None
    except json.JSONDecodeError as e:
        raise TaskFileError(path, f"invalid JSON: {e}") from e
    except OSError as e:
        raise TaskFileError(path, str(e)) from e

    properties: dict[str, dict[str, Any]] = {}
    if isinstance(data, dict):
        raw_tasks = data.get("tasks", [])
        raw_properties = data.get("properties", {})
        if not isinstance(raw_properties, dict) or not all(
            isinstance(bag, dict) for bag in raw_properties.values()
        ):
            raise TaskFileError(path, "'properties' must map file paths to objects")
        properties = raw_properties
    else:
        raw_tasks = data

    if not isinstance(raw_tasks, list):
        raise TaskFileError(path, "expected a list of tasks")

    tasks: list[Task] = []
    for index, item in enumerate(raw_tasks):
        if not isinstance(item, dict):
            raise TaskFileError(path, f"task #{index} is not an object")
        try:
            tasks.append(Task.from_dict(item))
        except ValueError as e:
            raise TaskFileError(path, f"task #{index}: {e}") from e

    logger.debug("Loaded %d task(s) from %s", len(tasks), path)
    return tasks, properties
