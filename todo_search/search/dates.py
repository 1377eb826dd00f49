"""Date values for ``scheduled:``/``deadline:`` filters.

:func:`parse_date_value` turns the text after a date prefix into one of:

- :class:`DateValue` - a single day, month or year (``2024-01-15``,
  ``2024-01``, ``2024``);
- :class:`DateRange` - a half-open ``[start, end)`` interval
  (``2024-01-01..2024-01-31``); the literal end day is included by
  advancing the stored end one period past it;
- :class:`DateComparison` - ``>``, ``>=``, ``<``, ``<=`` against a
  :class:`DateValue`;
- the string ``"none"`` (task has no date) or a relative bucket name
  (``overdue``, ``today``, ``next week``, ``next 7 days``, ...);
- ``None`` when the text is not a date at all.

All arithmetic is calendar arithmetic anchored on an explicit reference
date, so results never depend on the wall clock once a reference is given.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

NONE = "none"

RELATIVE_BUCKETS: tuple[str, ...] = (
    "overdue",
    "due",
    "today",
    "tomorrow",
    "this week",
    "next week",
    "this month",
    "next month",
)

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

WEEK_STARTS: frozenset[str] = frozenset({"monday", "sunday"})

PRECISIONS: frozenset[str] = frozenset({"year", "year-month", "full"})

_FULL_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_RE = re.compile(r"^(\d{4})$")
_NEXT_N_DAYS_RE = re.compile(r"^next\s+(\d+)\s+days?$")
_COMPARISON_RE = re.compile(r"^(>=|<=|>|<)\s*(.+)$")
_RELATIVE_UNQUOTED_RE = re.compile(r"^(next|this|last)\s+\w+$")
_IN_N_RE = re.compile(r"^in\s+(\d+)\s+(days?|weeks?)$")
_AGO_RE = re.compile(r"^(\d+)\s+(days?|weeks?)\s+ago$")
_WEEKDAY_RE = re.compile(r"^(next|this|last)\s+(" + "|".join(WEEKDAYS) + r")$")
_PERIOD_EDGE_RE = re.compile(r"^(end|start|beginning)\s+of\s+(?:the\s+)?(week|month)$")


def _first_of_month(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """Return the first day of the month *months* after the month of *d*."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def end_of_month(d: date) -> date:
    """Return the last day of the month containing *d*."""
    return add_months(d, 1) - timedelta(days=1)


def as_date(value: date | datetime) -> date:
    """Drop the time component of a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class DateValue:
    """A calendar period identified by a date and a precision."""

    date: date
    precision: str = "full"

    def __post_init__(self) -> None:
        try:
            self.end
        except OverflowError:
            raise ValueError(f"date out of range: {self.date}") from None

    @property
    def start(self) -> date:
        if self.precision == "year":
            return date(self.date.year, 1, 1)
        if self.precision == "year-month":
            return _first_of_month(self.date)
        return self.date

    @property
    def end(self) -> date:
        """Exclusive end of the period."""
        if self.precision == "year":
            return date(self.date.year + 1, 1, 1)
        if self.precision == "year-month":
            return add_months(self.date, 1)
        return self.date + timedelta(days=1)

    def contains(self, d: date) -> bool:
        return self.start <= d < self.end


@dataclass(frozen=True)
class DateRange:
    """Half-open interval ``[start, end)``."""

    start: date
    end: date

    def contains(self, d: date) -> bool:
        return is_in_range(d, self.start, self.end)


@dataclass(frozen=True)
class DateComparison:
    """``op value`` compared at the precision of *value*.

    ``>2024`` means after the whole of 2024, ``<=2024-03`` means up to the
    end of March 2024.
    """

    operator: str
    value: DateValue

    def contains(self, d: date) -> bool:
        if self.operator == ">":
            return d >= self.value.end
        if self.operator == ">=":
            return d >= self.value.start
        if self.operator == "<":
            return d < self.value.start
        if self.operator == "<=":
            return d < self.value.end
        return False


DateResult = Union[DateValue, DateRange, DateComparison, str, None]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def week_range(reference: date, week_starts_on: str = "monday") -> DateRange:
    """Return the week containing *reference* as ``[first day, first day + 7)``."""
    if week_starts_on == "sunday":
        offset = (reference.weekday() + 1) % 7
    else:
        offset = reference.weekday()
    start = reference - timedelta(days=offset)
    return DateRange(start, start + timedelta(days=7))


def is_overdue(d: date, reference: date) -> bool:
    return d < reference


def is_due(d: date, reference: date) -> bool:
    """Due means today or earlier."""
    return d <= reference


def is_due_today(d: date, reference: date) -> bool:
    return d == reference


def is_due_tomorrow(d: date, reference: date) -> bool:
    return d == reference + timedelta(days=1)


def is_in_range(d: date, start: date, end: date) -> bool:
    return start <= d < end


def is_in_current_week(d: date, reference: date, week_starts_on: str = "monday") -> bool:
    return week_range(reference, week_starts_on).contains(d)


def is_in_next_week(d: date, reference: date, week_starts_on: str = "monday") -> bool:
    return week_range(reference + timedelta(days=7), week_starts_on).contains(d)


def is_in_current_month(d: date, reference: date) -> bool:
    return (d.year, d.month) == (reference.year, reference.month)


def is_in_next_month(d: date, reference: date) -> bool:
    nxt = add_months(reference, 1)
    return (d.year, d.month) == (nxt.year, nxt.month)


def is_in_next_n_days(d: date, days: int, reference: date) -> bool:
    """True for today through the Nth day from today, inclusive."""
    return 0 <= (d - reference).days <= days


def _matches_bucket(bucket: str, d: date, reference: date, week_starts_on: str) -> bool:
    if bucket == "overdue":
        return is_overdue(d, reference)
    if bucket == "due":
        return is_due(d, reference)
    if bucket == "today":
        return is_due_today(d, reference)
    if bucket == "tomorrow":
        return is_due_tomorrow(d, reference)
    if bucket == "this week":
        return is_in_current_week(d, reference, week_starts_on)
    if bucket == "next week":
        return is_in_next_week(d, reference, week_starts_on)
    if bucket == "this month":
        return is_in_current_month(d, reference)
    if bucket == "next month":
        return is_in_next_month(d, reference)
    match = _NEXT_N_DAYS_RE.match(bucket)
    if match:
        return is_in_next_n_days(d, int(match.group(1)), reference)
    return False


def matches_date_value(
    value: date | datetime | None,
    result: DateResult,
    reference: date,
    week_starts_on: str = "monday",
) -> bool:
    """Return True if a task date satisfies a parsed date value.

    Args:
        value: The task's date, or None if it has none.
        result: Output of :func:`parse_date_value`.
        reference: The day treated as "today".
        week_starts_on: ``"monday"`` or ``"sunday"``.
    """
    if result is None:
        return False
    if result == NONE:
        return value is None
    if value is None:
        return False

    d = as_date(value)
    if isinstance(result, str):
        return _matches_bucket(result, d, reference, week_starts_on)
    return result.contains(d)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _exact_date(text: str) -> DateValue | None:
    """Parse ``YYYY-MM-DD``, ``YYYY-MM`` or ``YYYY``; None if invalid or out of range."""
    try:
        match = _FULL_DATE_RE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return DateValue(date(year, month, day), "full")

        match = _YEAR_MONTH_RE.match(text)
        if match:
            year, month = int(match.group(1)), int(match.group(2))
            return DateValue(date(year, month, 1), "year-month")

        match = _YEAR_RE.match(text)
        if match:
            return DateValue(date(int(match.group(1)), 1, 1), "year")
    except ValueError:
        return None

    return None


def _period(
    result: DateResult, reference: date
) -> tuple[date, date] | None:
    """Reduce a parsed value to a ``(start, end)`` pair for range building."""
    if isinstance(result, (DateValue, DateRange)):
        return result.start, result.end
    if result == "today":
        return reference, reference + timedelta(days=1)
    if result == "tomorrow":
        tomorrow = reference + timedelta(days=1)
        return tomorrow, tomorrow + timedelta(days=1)
    return None


def parse_natural_language_date(
    expression: str,
    reference: date,
    week_starts_on: str = "monday",
) -> DateValue | None:
    """Resolve a small, closed set of English date phrases to a day.

    Supported: ``today``, ``tomorrow``, ``yesterday``,
    ``next|this|last <weekday>``, ``in N days|weeks``, ``N days|weeks ago``,
    ``start|end of [the] week|month``. Anything else returns None.
    """
    try:
        return _resolve_phrase(" ".join(expression.lower().split()), reference, week_starts_on)
    except (ValueError, OverflowError):
        return None


def _resolve_phrase(text: str, reference: date, week_starts_on: str) -> DateValue | None:
    if text == "today":
        return DateValue(reference)
    if text == "tomorrow":
        return DateValue(reference + timedelta(days=1))
    if text == "yesterday":
        return DateValue(reference - timedelta(days=1))

    match = _WEEKDAY_RE.match(text)
    if match:
        which, weekday = match.groups()
        target = WEEKDAYS.index(weekday)
        current = reference.weekday()
        if which == "next":
            delta = (target - current) % 7 or 7
        elif which == "last":
            delta = -((current - target) % 7 or 7)
        else:
            start = week_range(reference, week_starts_on).start
            return DateValue(start + timedelta(days=(target - start.weekday()) % 7))
        return DateValue(reference + timedelta(days=delta))

    match = _IN_N_RE.match(text)
    if match:
        amount = int(match.group(1)) * (7 if match.group(2).startswith("week") else 1)
        return DateValue(reference + timedelta(days=amount))

    match = _AGO_RE.match(text)
    if match:
        amount = int(match.group(1)) * (7 if match.group(2).startswith("week") else 1)
        return DateValue(reference - timedelta(days=amount))

    match = _PERIOD_EDGE_RE.match(text)
    if match:
        edge, unit = match.groups()
        if unit == "month":
            if edge == "end":
                return DateValue(end_of_month(reference))
            return DateValue(_first_of_month(reference))
        week = week_range(reference, week_starts_on)
        if edge == "end":
            return DateValue(week.end - timedelta(days=1))
        return DateValue(week.start)

    return None


def parse_date_value(
    raw: str | None,
    reference_date: date | datetime | None = None,
    week_starts_on: str = "monday",
) -> DateResult:
    """Parse the value of a date filter.

    Natural-language phrases must be wrapped in double quotes, except the
    unquoted ``next|this|last <word>`` and ``in N days`` forms.

    Args:
        raw: The filter value as written (quotes included, if any).
        reference_date: The day treated as "today"; defaults to the
            current date.
        week_starts_on: ``"monday"`` or ``"sunday"``.

    Returns:
        A :class:`DateValue`, :class:`DateRange`, :class:`DateComparison`,
        ``"none"``, a relative bucket name, or None if unparseable.
    """
    try:
        return _parse_date_value(raw, reference_date, week_starts_on)
    except (ValueError, OverflowError):
        return None


def _parse_date_value(
    raw: str | None, reference_date: date | datetime | None, week_starts_on: str
) -> DateResult:
    if raw is None:
        return None
    text = " ".join(raw.strip().lower().split())
    if not text:
        return None

    quoted = len(text) >= 2 and text.startswith('"') and text.endswith('"')
    if quoted:
        text = text[1:-1].strip()
        if not text:
            return None

    reference = as_date(reference_date) if reference_date is not None else date.today()

    if text == NONE:
        return NONE
    if text in RELATIVE_BUCKETS:
        return text

    match = _NEXT_N_DAYS_RE.match(text)
    if match:
        return f"next {int(match.group(1))} days"

    match = _COMPARISON_RE.match(text)
    if match:
        operator, operand = match.groups()
        operand_text = f'"{operand}"' if quoted else operand
        parsed = parse_date_value(operand_text, reference, week_starts_on)
        bounds = _period(parsed, reference)
        if isinstance(parsed, DateValue):
            return DateComparison(operator, parsed)
        if bounds is not None and isinstance(parsed, str):
            return DateComparison(operator, DateValue(bounds[0]))
        return None

    if ".." in text:
        left, _, right = text.partition("..")
        start = _period(parse_date_value(left, reference, week_starts_on), reference)
        end = _period(parse_date_value(right, reference, week_starts_on), reference)
        if start is None or end is None:
            return None
        return DateRange(start[0], end[1])

    exact = _exact_date(text)
    if exact is not None:
        return exact

    if quoted or _RELATIVE_UNQUOTED_RE.match(text) or _IN_N_RE.match(text):
        return parse_natural_language_date(text, reference, week_starts_on)

    return None
