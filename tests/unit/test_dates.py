"""Unit tests for date filter values and date predicates."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from todo_search.search.dates import (
    DateComparison,
    DateRange,
    DateValue,
    add_months,
    end_of_month,
    is_due,
    is_in_current_month,
    is_in_current_week,
    is_in_next_month,
    is_in_next_n_days,
    is_in_next_week,
    is_overdue,
    matches_date_value,
    parse_date_value,
    parse_natural_language_date,
    week_range,
)

# Wednesday
REF = date(2024, 1, 17)


class TestExactDates:
    def test_full_date(self) -> None:
        result = parse_date_value("2024-01-15", REF)
        assert result == DateValue(date(2024, 1, 15), "full")
        assert result.end == date(2024, 1, 16)

    def test_year_month(self) -> None:
        result = parse_date_value("2024-02", REF)
        assert result == DateValue(date(2024, 2, 1), "year-month")
        assert result.contains(date(2024, 2, 29))
        assert not result.contains(date(2024, 3, 1))

    def test_year(self) -> None:
        result = parse_date_value("2025", REF)
        assert result.precision == "year"
        assert result.start == date(2025, 1, 1)
        assert result.end == date(2026, 1, 1)

    @pytest.mark.parametrize("raw", ["2024-02-30", "2024-13", "24-01-01", "soon", "", "   "])
    def test_unparseable(self, raw: str) -> None:
        assert parse_date_value(raw, REF) is None

    def test_none_input(self) -> None:
        assert parse_date_value(None, REF) is None


class TestRanges:
    def test_range_end_is_exclusive(self) -> None:
        result = parse_date_value("2024-01-01..2024-01-31", REF)
        assert result == DateRange(date(2024, 1, 1), date(2024, 2, 1))
        assert result.contains(date(2024, 1, 31))
        assert not result.contains(date(2024, 2, 1))

    def test_month_range_covers_whole_months(self) -> None:
        result = parse_date_value("2024-01..2024-03", REF)
        assert result == DateRange(date(2024, 1, 1), date(2024, 4, 1))

    def test_relative_endpoints(self) -> None:
        result = parse_date_value("today..tomorrow", REF)
        assert result == DateRange(REF, date(2024, 1, 19))

    def test_bad_endpoint(self) -> None:
        assert parse_date_value("2024-01-01..later", REF) is None


class TestBucketsAndComparisons:
    @pytest.mark.parametrize(
        "raw",
        ["overdue", "due", "today", "tomorrow", "this week", "next week", "this month", "next month"],
    )
    def test_relative_buckets(self, raw: str) -> None:
        assert parse_date_value(raw, REF) == raw

    def test_bucket_is_case_and_space_insensitive(self) -> None:
        assert parse_date_value("Next   Week", REF) == "next week"

    def test_next_n_days(self) -> None:
        assert parse_date_value("next 7 days", REF) == "next 7 days"
        assert parse_date_value("next 1 day", REF) == "next 1 days"

    def test_none(self) -> None:
        assert parse_date_value("none", REF) == "none"

    def test_comparison(self) -> None:
        result = parse_date_value(">=2024-01-10", REF)
        assert result == DateComparison(">=", DateValue(date(2024, 1, 10)))

    @pytest.mark.parametrize(
        ("raw", "day", "expected"),
        [
            (">=2024-01-10", date(2024, 1, 10), True),
            (">=2024-01-10", date(2024, 1, 9), False),
            (">2024-01-10", date(2024, 1, 10), False),
            (">2024-01-10", date(2024, 1, 11), True),
            ("<=2024-01-10", date(2024, 1, 10), True),
            ("<2024-01-10", date(2024, 1, 10), False),
            (">2024", date(2024, 12, 31), False),
            (">2024", date(2025, 1, 1), True),
            ("<=2024-03", date(2024, 3, 31), True),
            ("<today", date(2024, 1, 16), True),
        ],
    )
    def test_comparison_is_day_precise(self, raw: str, day: date, expected: bool) -> None:
        result = parse_date_value(raw, REF)
        assert result.contains(day) is expected


class TestNaturalLanguage:
    @pytest.mark.parametrize(
        ("phrase", "expected"),
        [
            ("today", date(2024, 1, 17)),
            ("tomorrow", date(2024, 1, 18)),
            ("yesterday", date(2024, 1, 16)),
            ("next friday", date(2024, 1, 19)),
            ("next wednesday", date(2024, 1, 24)),
            ("last monday", date(2024, 1, 15)),
            ("last wednesday", date(2024, 1, 10)),
            ("this friday", date(2024, 1, 19)),
            ("this monday", date(2024, 1, 15)),
            ("in 3 days", date(2024, 1, 20)),
            ("in 2 weeks", date(2024, 1, 31)),
            ("2 days ago", date(2024, 1, 15)),
            ("end of month", date(2024, 1, 31)),
            ("start of the month", date(2024, 1, 1)),
            ("end of week", date(2024, 1, 21)),
            ("beginning of week", date(2024, 1, 15)),
        ],
    )
    def test_phrases(self, phrase: str, expected: date) -> None:
        assert parse_natural_language_date(phrase, REF) == DateValue(expected)

    def test_unknown_phrase(self) -> None:
        assert parse_natural_language_date("a fortnight hence", REF) is None

    def test_quoted_phrase_is_parsed(self) -> None:
        assert parse_date_value('"next Friday"', REF) == DateValue(date(2024, 1, 19))

    def test_unquoted_next_weekday_is_parsed(self) -> None:
        assert parse_date_value("next friday", REF) == DateValue(date(2024, 1, 19))

    def test_unquoted_free_phrase_is_not_parsed(self) -> None:
        assert parse_date_value("end of month", REF) is None
        assert parse_date_value('"end of month"', REF) == DateValue(date(2024, 1, 31))

    def test_sunday_week_start(self) -> None:
        assert parse_natural_language_date("end of week", REF, "sunday") == DateValue(
            date(2024, 1, 20)
        )


class TestPredicates:
    def test_overdue_and_due(self) -> None:
        assert is_overdue(date(2024, 1, 16), REF)
        assert not is_overdue(REF, REF)
        assert is_due(REF, REF)
        assert not is_due(date(2024, 1, 18), REF)

    def test_week_range_monday(self) -> None:
        assert week_range(REF) == DateRange(date(2024, 1, 15), date(2024, 1, 22))

    def test_week_range_sunday(self) -> None:
        assert week_range(REF, "sunday") == DateRange(date(2024, 1, 14), date(2024, 1, 21))

    def test_week_range_on_sunday(self) -> None:
        sunday = date(2024, 1, 21)
        assert week_range(sunday).start == date(2024, 1, 15)
        assert week_range(sunday, "sunday").start == sunday

    def test_current_and_next_week(self) -> None:
        assert is_in_current_week(date(2024, 1, 21), REF)
        assert not is_in_current_week(date(2024, 1, 21), REF, "sunday")
        assert is_in_next_week(date(2024, 1, 22), REF)
        assert is_in_next_week(date(2024, 1, 21), REF, "sunday")

    def test_month_rollover(self) -> None:
        december = date(2024, 12, 5)
        assert is_in_current_month(date(2024, 12, 31), december)
        assert is_in_next_month(date(2025, 1, 1), december)
        assert add_months(december, 1) == date(2025, 1, 1)
        assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)

    def test_next_n_days_is_inclusive(self) -> None:
        assert is_in_next_n_days(REF, 7, REF)
        assert is_in_next_n_days(date(2024, 1, 24), 7, REF)
        assert not is_in_next_n_days(date(2024, 1, 25), 7, REF)
        assert not is_in_next_n_days(date(2024, 1, 16), 7, REF)


class TestMatchesDateValue:
    def test_none_matches_missing_date(self) -> None:
        assert matches_date_value(None, "none", REF)
        assert not matches_date_value(REF, "none", REF)

    def test_missing_date_never_matches_a_value(self) -> None:
        assert not matches_date_value(None, "today", REF)
        assert not matches_date_value(None, DateValue(REF), REF)

    def test_bucket(self) -> None:
        assert matches_date_value(date(2024, 1, 10), "overdue", REF)
        assert matches_date_value(date(2024, 1, 20), "next 3 days", REF)

    def test_datetime_is_truncated(self) -> None:
        assert matches_date_value(datetime(2024, 1, 17, 23, 59), "today", REF)

    def test_unparsed_value_never_matches(self) -> None:
        assert not matches_date_value(REF, None, REF)


class TestCalendarEdges:
    @pytest.mark.parametrize(
        "raw",
        [
            "0000-01",
            "0000-01-01",
            "0000",
            "9999-12-31",
            "9999-12",
            "9999",
            ">=9999-12-31",
            "<0000-01",
            "2024-01-01..9999-12-31",
            "0000-01..2024-01",
            '"in 99999999 days"',
            '"99999999 weeks ago"',
        ],
    )
    def test_out_of_range_is_unparseable(self, raw: str) -> None:
        assert parse_date_value(raw, REF) is None

    def test_last_representable_periods(self) -> None:
        assert parse_date_value("9999-12-30", REF).end == date(9999, 12, 31)
        assert parse_date_value("9998", REF).end == date(9999, 1, 1)

    def test_natural_language_overflow(self) -> None:
        assert parse_natural_language_date("in 99999999 days", REF) is None

    def test_next_n_days_with_huge_n(self) -> None:
        assert is_in_next_n_days(date(2024, 2, 1), 10**9, REF)
