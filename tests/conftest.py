"""Shared pytest fixtures."""

from __future__ import annotations

import json
import shutil
import tempfile
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from todo_search.search.evaluator import EvaluationSettings
from todo_search.tasks import Task

if TYPE_CHECKING:
    from collections.abc import Generator

# Wednesday
REFERENCE_DATE = date(2024, 1, 17)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[paths]
tasks_file = "/tmp/todo-search-tasks.json"

[search]
case_sensitive = false
week_starts_on = "sunday"
strict = false

[display]
colored_output = true

[keywords]
active = ["STARTED"]

[priority]
high = ["urgent"]
""")
    return config_path


@pytest.fixture
def settings() -> EvaluationSettings:
    """Evaluation settings pinned to a fixed reference date."""
    return EvaluationSettings(reference_date=REFERENCE_DATE)


@pytest.fixture
def sample_tasks() -> list[Task]:
    return [
        Task(
            path="Projects/Alpha/plan.md",
            raw_text="TODO [#A] Fix login bug #urgent #backend",
            text="Fix login bug",
            state="TODO",
            priority="high",
            scheduled_date=date(2024, 1, 15),
            deadline_date=date(2024, 1, 20),
            line=3,
        ),
        Task(
            path="Projects/Beta/notes.md",
            raw_text="DOING Write release notes #docs",
            text="Write release notes",
            state="DOING",
            priority="med",
            scheduled_date=date(2024, 1, 17),
            line=10,
        ),
        Task(
            path="Journal/2024-01-10.md",
            raw_text="DONE Call the plumber",
            text="Call the plumber",
            state="DONE",
            deadline_date=date(2024, 1, 10),
            completed=True,
        ),
        Task(
            path="inbox.md",
            raw_text="WAIT Hear back from Bob #followup",
            text="Hear back from Bob",
            state="WAIT",
            priority="low",
            line=1,
        ),
    ]


@pytest.fixture
def tasks_file(temp_dir: Path, sample_tasks: list[Task]) -> Path:
    """Write the sample tasks, plus file properties, as a JSON export."""
    path = temp_dir / "tasks.json"
    data = {
        "tasks": [task.to_dict() for task in sample_tasks],
        "properties": {
            "Projects/Alpha/plan.md": {"status": "Active", "effort": 5},
            "Projects/Beta/notes.md": {"status": "Draft", "effort": 2},
        },
    }
    path.write_text(json.dumps(data))
    return path
