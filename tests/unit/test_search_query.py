"""Unit tests for running queries over task collections."""

from __future__ import annotations

from datetime import date

import pytest

from todo_search.exceptions import EvaluationError, SearchSyntaxError
from todo_search.search import EvaluationSettings, filter_tasks, matches, parse
from todo_search.tasks import Task

REFERENCE_DATE = date(2024, 1, 17)


def _paths(tasks: list[Task]) -> list[str]:
    return [task.path for task in tasks]


class TestFilterTasks:
    def test_free_text(self, sample_tasks: list[Task], settings: EvaluationSettings) -> None:
        result = filter_tasks(sample_tasks, "plumber", settings=settings)
        assert _paths(result) == ["Journal/2024-01-10.md"]

    def test_preserves_input_order(
        self, sample_tasks: list[Task], settings: EvaluationSettings
    ) -> None:
        result = filter_tasks(sample_tasks, "NOT state:completed", settings=settings)
        assert _paths(result) == [
            "Projects/Alpha/plan.md",
            "Projects/Beta/notes.md",
            "inbox.md",
        ]

    def test_accepts_parsed_query(
        self, sample_tasks: list[Task], settings: EvaluationSettings
    ) -> None:
        node = parse("path:Projects priority:high")
        assert _paths(filter_tasks(sample_tasks, node, settings=settings)) == [
            "Projects/Alpha/plan.md"
        ]

    def test_mixed_query(self, sample_tasks: list[Task], settings: EvaluationSettings) -> None:
        query = "path:Projects (scheduled:today OR deadline:overdue OR tag:urgent) -state:done"
        result = filter_tasks(sample_tasks, query, settings=settings)
        assert _paths(result) == ["Projects/Alpha/plan.md", "Projects/Beta/notes.md"]

    def test_properties_by_path(
        self, sample_tasks: list[Task], settings: EvaluationSettings
    ) -> None:
        properties = {"Projects/Beta/notes.md": {"status": "Draft"}}
        result = filter_tasks(
            sample_tasks, "[status:Draft]", settings=settings, properties_by_path=properties
        )
        assert _paths(result) == ["Projects/Beta/notes.md"]

    def test_case_sensitive(self, sample_tasks: list[Task], settings: EvaluationSettings) -> None:
        assert filter_tasks(sample_tasks, "bob", settings=settings)
        assert not filter_tasks(sample_tasks, "bob", case_sensitive=True, settings=settings)

    def test_syntax_error_propagates(self, sample_tasks: list[Task]) -> None:
        with pytest.raises(SearchSyntaxError):
            filter_tasks(sample_tasks, "(a")

    def test_strict_evaluation_error_propagates(self, sample_tasks: list[Task]) -> None:
        strict = EvaluationSettings(reference_date=REFERENCE_DATE, strict=True)
        with pytest.raises(EvaluationError):
            filter_tasks(sample_tasks, "color:red", settings=strict)


class TestMatches:
    def test_match(self, sample_tasks: list[Task], settings: EvaluationSettings) -> None:
        assert matches("tag:urgent", sample_tasks[0], settings=settings)
        assert not matches("tag:urgent", sample_tasks[1], settings=settings)

    def test_invalid_query_matches_nothing(self, sample_tasks: list[Task]) -> None:
        assert matches("(a AND", sample_tasks[0]) is False
