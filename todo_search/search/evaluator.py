"""Evaluate a parsed search AST against a single task record.

Evaluation is pure: the task, its property bag and the settings are only
read. Filters on unknown fields raise :class:`EvaluationError` internally;
unless ``settings.strict`` is set the error is logged and the offending
filter simply does not match, so one bad filter does not sink the query.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from todo_search.exceptions import EvaluationError
from todo_search.search.ast_nodes import (
    AndNode,
    NotNode,
    OrNode,
    PhraseNode,
    PrefixFilter,
    PropertyFilter,
    RangeFilter,
    SearchNode,
    TermNode,
)
from todo_search.search.dates import (
    NONE,
    DateComparison,
    DateRange,
    DateValue,
    WEEK_STARTS,
    as_date,
    is_in_range,
    matches_date_value,
    parse_date_value,
)
from todo_search.search.keywords import (
    KEYWORD_GROUPS,
    PRIORITY_SYNONYMS,
    KeywordSets,
    normalize_priority,
)

if TYPE_CHECKING:
    from todo_search.tasks import Task

logger = logging.getLogger(__name__)

_NUMERIC_COMPARISON_RE = re.compile(r"^([<>]=?)(\d+(?:\.\d+)?)$")
_PROPERTY_OR_SEPARATOR = " OR "


@dataclass(frozen=True)
class EvaluationSettings:
    """Knobs that influence matching but not parsing.

    Attributes:
        keywords: State keyword groups used by ``state:<group>``.
        priority_synonyms: Accepted spellings per canonical priority.
        week_starts_on: ``"monday"`` or ``"sunday"``.
        reference_date: The day treated as "today"; None means the current
            date at evaluation time.
        strict: Raise :class:`EvaluationError` instead of treating a bad
            filter as a non-match.
    """

    keywords: KeywordSets = field(default_factory=KeywordSets)
    priority_synonyms: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: dict(PRIORITY_SYNONYMS)
    )
    week_starts_on: str = "monday"
    reference_date: date | None = None
    strict: bool = False

    def __post_init__(self) -> None:
        if self.week_starts_on not in WEEK_STARTS:
            raise ValueError(
                f"week_starts_on must be 'monday' or 'sunday', got {self.week_starts_on!r}"
            )

    def today(self) -> date:
        if self.reference_date is None:
            return date.today()
        return as_date(self.reference_date)


@dataclass(frozen=True)
class _Context:
    task: Task
    case_sensitive: bool
    settings: EvaluationSettings
    properties: Mapping[str, Any]
    reference: date

    def fold(self, text: str) -> str:
        return text if self.case_sensitive else text.lower()


def evaluate(
    node: SearchNode,
    task: Task,
    case_sensitive: bool = False,
    settings: EvaluationSettings | None = None,
    properties: Mapping[str, Any] | None = None,
) -> bool:
    """Return True if *task* matches the query rooted at *node*.

    Args:
        node: Root of a parsed query.
        task: The record to test.
        case_sensitive: Match text case-sensitively.
        settings: Keyword sets, week start, reference date and strictness.
        properties: Property bag of the task's source file, for
            ``[key:value]`` filters.

    Raises:
        EvaluationError: In strict mode, for unknown fields or unparseable
            date values; always, for an empty AND/OR node.
    """
    settings = settings or EvaluationSettings()
    ctx = _Context(
        task=task,
        case_sensitive=case_sensitive,
        settings=settings,
        properties=properties or {},
        reference=settings.today(),
    )
    return _evaluate(node, ctx)


def _evaluate(node: SearchNode, ctx: _Context) -> bool:
    if isinstance(node, TermNode):
        return _evaluate_term(node.value, ctx)
    if isinstance(node, PhraseNode):
        return _evaluate_phrase(node.value, ctx)
    if isinstance(node, AndNode):
        if not node.children:
            raise EvaluationError("AND node has no children")
        return all(_evaluate(child, ctx) for child in node.children)
    if isinstance(node, OrNode):
        if not node.children:
            raise EvaluationError("OR node has no children")
        return any(_evaluate(child, ctx) for child in node.children)
    if isinstance(node, NotNode):
        return not _evaluate(node.child, ctx)
    if isinstance(node, (PrefixFilter, PropertyFilter, RangeFilter)):
        return _evaluate_filter(node, ctx)
    raise EvaluationError(f"Unsupported node: {node!r}")


def _evaluate_filter(node: PrefixFilter | PropertyFilter | RangeFilter, ctx: _Context) -> bool:
    """Evaluate one filter, downgrading errors to a non-match unless strict."""
    try:
        if isinstance(node, PrefixFilter):
            return _evaluate_prefix_filter(node, ctx)
        if isinstance(node, RangeFilter):
            return _evaluate_range_filter(node, ctx)
        return _evaluate_property_filter(node, ctx)
    except EvaluationError as e:
        if ctx.settings.strict:
            raise
        logger.debug("Filter at position %d treated as no match: %s", node.position, e)
        return False


# ---------------------------------------------------------------------------
# Free text
# ---------------------------------------------------------------------------


def _searchable_fields(task: Task) -> list[str]:
    fields = [task.raw_text, task.text, task.path, task.filename]
    return [value for value in fields if value]


def _evaluate_term(value: str, ctx: _Context) -> bool:
    if not value:
        return False
    needle = ctx.fold(value)
    return any(needle in ctx.fold(haystack) for haystack in _searchable_fields(ctx.task))


def _phrase_pattern(phrase: str, case_sensitive: bool) -> re.Pattern[str]:
    """Match *phrase* as a whole: word characters at its edges need word boundaries."""
    pattern = re.escape(phrase)
    if re.match(r"\w", phrase):
        pattern = r"(?<!\w)" + pattern
    if re.search(r"\w$", phrase):
        pattern = pattern + r"(?!\w)"
    return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)


def _evaluate_phrase(value: str, ctx: _Context) -> bool:
    if not value:
        return False
    pattern = _phrase_pattern(value, ctx.case_sensitive)
    return any(pattern.search(haystack) for haystack in _searchable_fields(ctx.task))


# ---------------------------------------------------------------------------
# Prefix filters
# ---------------------------------------------------------------------------


def _evaluate_prefix_filter(node: PrefixFilter, ctx: _Context) -> bool:
    handler = _PREFIX_HANDLERS.get(node.field)
    if handler is None:
        raise EvaluationError(f"Unknown search field: {node.field}", field=node.field)
    if not node.value:
        return False
    return handler(node.value, node.exact, ctx)


def _path_filter(value: str, exact: bool, ctx: _Context) -> bool:
    path = ctx.task.path
    if not path:
        return False
    needle = ctx.fold(value.strip("/"))
    target = ctx.fold(path)
    if not needle:
        return False

    if target == needle or target.startswith(needle + "/"):
        return True
    if exact:
        return False

    # Any run of parent folders, e.g. "b/c" in "a/b/c/file.md"
    folders = target.split("/")[:-1]
    wanted = needle.split("/")
    for i in range(len(folders) - len(wanted) + 1):
        if folders[i : i + len(wanted)] == wanted:
            return True
    return False


def _file_filter(value: str, exact: bool, ctx: _Context) -> bool:
    filename = ctx.task.filename
    if not filename:
        return False
    needle = ctx.fold(value)
    target = ctx.fold(filename)
    if exact:
        stem = target.rsplit(".", 1)[0] if "." in target else target
        return needle in (target, stem)
    return needle in target


def _tag_filter(value: str, exact: bool, ctx: _Context) -> bool:
    needle = ctx.fold(value.lstrip("#"))
    if not needle:
        return False
    tags = [ctx.fold(tag) for tag in ctx.task.tags]
    if exact:
        return needle in tags
    return any(needle in tag for tag in tags)


def _content_filter(value: str, exact: bool, ctx: _Context) -> bool:
    text = ctx.task.text
    if not text:
        return False
    if exact:
        return ctx.fold(text.strip()) == ctx.fold(value)
    return ctx.fold(value) in ctx.fold(text)


def _state_filter(value: str, exact: bool, ctx: _Context) -> bool:
    state = ctx.task.state or ""
    if ctx.fold(state) == ctx.fold(value):
        return True
    if exact:
        return False

    group = value.lower()
    if group not in KEYWORD_GROUPS:
        return False
    if group == "completed" and ctx.task.completed:
        return True
    return state.upper() in ctx.settings.keywords.keywords_in(group)


def _priority_filter(value: str, exact: bool, ctx: _Context) -> bool:
    if value.strip().lower() == NONE:
        return not ctx.task.priority
    synonyms = ctx.settings.priority_synonyms
    wanted = normalize_priority(value, synonyms)
    actual = normalize_priority(ctx.task.priority, synonyms)
    return actual is not None and actual == wanted


def _date_filter(raw: str, exact: bool, task_date: date | None, ctx: _Context) -> bool:
    text = f'"{raw}"' if exact else raw
    result = parse_date_value(text, ctx.reference, ctx.settings.week_starts_on)
    if result is None:
        raise EvaluationError(f"Unrecognized date value: {raw}")
    return matches_date_value(task_date, result, ctx.reference, ctx.settings.week_starts_on)


def _scheduled_filter(value: str, exact: bool, ctx: _Context) -> bool:
    return _date_filter(value, exact, ctx.task.scheduled_date, ctx)


def _deadline_filter(value: str, exact: bool, ctx: _Context) -> bool:
    return _date_filter(value, exact, ctx.task.deadline_date, ctx)


_PREFIX_HANDLERS = {
    "path": _path_filter,
    "file": _file_filter,
    "tag": _tag_filter,
    "content": _content_filter,
    "state": _state_filter,
    "priority": _priority_filter,
    "scheduled": _scheduled_filter,
    "deadline": _deadline_filter,
}


# ---------------------------------------------------------------------------
# Range filters
# ---------------------------------------------------------------------------


def _range_bound(raw: str, exact: bool, ctx: _Context) -> DateValue | DateRange:
    # Quoted bounds arrive unquoted and may be natural language
    text = f'"{raw}"' if exact else raw
    result = parse_date_value(text, ctx.reference, ctx.settings.week_starts_on)
    if result == "today":
        return DateValue(ctx.reference)
    if result == "tomorrow":
        return DateValue(ctx.reference + timedelta(days=1))
    if isinstance(result, (DateValue, DateRange)):
        return result
    raise EvaluationError(f"Unrecognized range bound: {raw}")


def _evaluate_range_filter(node: RangeFilter, ctx: _Context) -> bool:
    if node.field == "scheduled":
        task_date = ctx.task.scheduled_date
    elif node.field == "deadline":
        task_date = ctx.task.deadline_date
    else:
        raise EvaluationError(f"Range filter on unsupported field: {node.field}", field=node.field)

    start = _range_bound(node.start, node.start_exact, ctx)
    end = _range_bound(node.end, node.end_exact, ctx)
    if task_date is None:
        return False
    return is_in_range(as_date(task_date), start.start, end.end)


# ---------------------------------------------------------------------------
# Property filters
# ---------------------------------------------------------------------------


def _evaluate_property_filter(node: PropertyFilter, ctx: _Context) -> bool:
    key = node.key
    props = ctx.properties
    if key not in props:
        return False

    wanted = node.property_value
    if wanted is None:
        return True

    wanted = wanted.strip()
    if wanted.startswith("(") and wanted.endswith(")"):
        wanted = wanted[1:-1].strip()
    alternatives = [part.strip() for part in wanted.split(_PROPERTY_OR_SEPARATOR)]

    actual = props[key]
    values = actual if isinstance(actual, (list, tuple, set, frozenset)) else [actual]
    return any(
        _property_value_matches(alternative, value, node.exact, ctx)
        for alternative in alternatives
        if alternative
        for value in values
    )


def _property_date(value: Any) -> date | None:
    if isinstance(value, (date, datetime)):
        return as_date(value)
    if isinstance(value, str):
        parsed = parse_date_value(value)
        if isinstance(parsed, DateValue) and parsed.precision == "full":
            return parsed.date
    return None


def _property_value_matches(wanted: str, actual: Any, exact: bool, ctx: _Context) -> bool:
    if wanted.lower() == "null":
        return actual is None
    if actual is None:
        return False

    if isinstance(actual, bool):
        return wanted.lower() == str(actual).lower()

    match = _NUMERIC_COMPARISON_RE.match(wanted)
    if match:
        if not isinstance(actual, (int, float)):
            return False
        operator, number = match.group(1), float(match.group(2))
        return {
            ">": actual > number,
            ">=": actual >= number,
            "<": actual < number,
            "<=": actual <= number,
        }[operator]

    if isinstance(actual, (int, float)):
        try:
            return float(wanted) == actual
        except ValueError:
            return False

    actual_date = _property_date(actual)
    if actual_date is not None:
        result = parse_date_value(wanted, ctx.reference, ctx.settings.week_starts_on)
        if isinstance(result, (DateValue, DateRange, DateComparison)) or (
            isinstance(result, str) and result != NONE
        ):
            if matches_date_value(actual_date, result, ctx.reference, ctx.settings.week_starts_on):
                return True

    text = ctx.fold(str(actual))
    needle = ctx.fold(wanted)
    if exact:
        return text == needle
    return needle in text
