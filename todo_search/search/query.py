"""Run a search query over a collection of tasks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from todo_search.exceptions import SearchSyntaxError
from todo_search.search.ast_nodes import SearchNode
from todo_search.search.evaluator import EvaluationSettings, evaluate
from todo_search.search.parser import parse

if TYPE_CHECKING:
    from todo_search.tasks import Task

logger = logging.getLogger(__name__)


def filter_tasks(
    tasks: Iterable[Task],
    query: str | SearchNode,
    case_sensitive: bool = False,
    settings: EvaluationSettings | None = None,
    properties_by_path: Mapping[str, Mapping[str, Any]] | None = None,
) -> list[Task]:
    """Return the tasks matching *query*, in input order.

    The query is parsed once and evaluated per task.

    Args:
        tasks: Task records to filter.
        query: A query string or an already parsed AST.
        case_sensitive: Match text case-sensitively.
        settings: Evaluation settings shared by every task.
        properties_by_path: Property bags keyed by task path.

    Returns:
        List of matching tasks.

    Raises:
        SearchSyntaxError: If *query* is a string that does not parse.
        EvaluationError: In strict mode, if a filter cannot be applied.
    """
    node = parse(query) if isinstance(query, str) else query
    settings = settings or EvaluationSettings()
    properties_by_path = properties_by_path or {}

    matched = [
        task
        for task in tasks
        if evaluate(
            node,
            task,
            case_sensitive=case_sensitive,
            settings=settings,
            properties=properties_by_path.get(task.path),
        )
    ]
    logger.debug("Query matched %d task(s)", len(matched))
    return matched


def matches(
    query: str,
    task: Task,
    case_sensitive: bool = False,
    settings: EvaluationSettings | None = None,
    properties: Mapping[str, Any] | None = None,
) -> bool:
    """Return True if *task* matches *query*; a query that does not parse matches nothing."""
    try:
        node = parse(query)
    except SearchSyntaxError as e:
        logger.debug("Ignoring invalid query %r: %s", query, e)
        return False
    return evaluate(node, task, case_sensitive, settings, properties)
