"""Search a JSON task export with the query language."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path

import click
from rich.markup import escape

from todo_search.cli import Context, pass_context
from todo_search.exceptions import EvaluationError, SearchSyntaxError, TaskFileError
from todo_search.search.keywords import normalize_priority
from todo_search.search.parser import parse_query
from todo_search.search.query import filter_tasks
from todo_search.tasks import Task, load_tasks
from todo_search.utils.output import (
    create_table,
    debug,
    error,
    info,
    pager_print,
    print_caret,
    render,
    verbose,
)

EXIT_SUCCESS = 0
EXIT_NO_RESULTS = 0
EXIT_PARSE_ERROR = 1
EXIT_TASKS_ERROR = 2

_PRIORITY_ORDER = {"high": 0, "med": 1, "low": 2}

# Table columns and their configuration
# "attr": the Task attribute used for sorting
COLUMN_DEFS: dict[str, dict] = {
    "state": {"header": "State", "style": "task.state", "justify": "left", "attr": "state"},
    "priority": {
        "header": "Pri",
        "style": "task.priority",
        "justify": "left",
        "attr": "priority",
    },
    "scheduled": {
        "header": "Scheduled",
        "style": "task.date",
        "justify": "left",
        "attr": "scheduled_date",
    },
    "deadline": {
        "header": "Deadline",
        "style": "task.date",
        "justify": "left",
        "attr": "deadline_date",
    },
    "text": {"header": "Task", "style": None, "justify": "left", "attr": "text"},
    "path": {"header": "File", "style": "path", "justify": "left", "attr": "path"},
}


def _format_date(value: date | None) -> str:
    return value.isoformat() if value else ""


def _get_cell_value(task: Task, col: str) -> str:
    """Get the formatted cell value for a column."""
    if col == "state":
        return task.state
    elif col == "priority":
        return task.priority or ""
    elif col == "scheduled":
        return _format_date(task.scheduled_date)
    elif col == "deadline":
        return _format_date(task.deadline_date)
    elif col == "text":
        return task.text or task.raw_text
    elif col == "path":
        return f"{task.path}:{task.line + 1}"
    return ""


def _sort_key(task: Task, attr: str, synonyms: Mapping[str, frozenset[str]] | None = None):
    value = getattr(task, attr)
    if attr == "priority":
        value = _PRIORITY_ORDER.get(normalize_priority(value, synonyms) or "", None)
    # Put None values last regardless of direction
    if value is None or value == "":
        return (1, "")
    if isinstance(value, str):
        return (0, value.lower())
    return (0, value)


def _sort_tasks(
    tasks: list[Task],
    sort_col: str,
    synonyms: Mapping[str, frozenset[str]] | None = None,
) -> list[Task]:
    descending = sort_col.startswith("-")
    attr = COLUMN_DEFS[sort_col.lstrip("-")]["attr"]
    present = [t for t in tasks if _sort_key(t, attr, synonyms)[0] == 0]
    missing = [t for t in tasks if _sort_key(t, attr, synonyms)[0] == 1]
    present.sort(key=lambda t: _sort_key(t, attr, synonyms), reverse=descending)
    return present + missing


@click.command("search")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--tasks",
    "-t",
    "tasks_file",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON task export to search (default: paths.tasks_file from config)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "paths", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--case-sensitive/--ignore-case",
    default=None,
    help="Match free text case-sensitively (default: from config)",
)
@click.option(
    "--today",
    "today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Evaluate relative dates as if today were this date (YYYY-MM-DD)",
)
@click.option(
    "--week-start",
    type=click.Choice(["monday", "sunday"], case_sensitive=False),
    default=None,
    help="First day of the week for 'this week'/'next week' (default: from config)",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail on unknown fields and bad dates instead of skipping them",
)
@click.option(
    "--limit",
    "-l",
    type=click.IntRange(min=0),
    default=None,
    help="Limit number of results",
)
@click.option(
    "--sort",
    "-s",
    "sort_col",
    default=None,
    help="Sort by column name. Prefix with - for descending (e.g. -deadline)",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    tasks_file: Path | None,
    output_format: str,
    case_sensitive: bool | None,
    today: datetime | None,
    week_start: str | None,
    strict: bool,
    limit: int | None,
    sort_col: str | None,
) -> None:
    """Filter tasks with a boolean, field-aware query.

    QUERY is joined with spaces. Bare words match the task line, text,
    path and file name; juxtaposed terms are ANDed.

    \b
    Syntax examples:
      todo-search search fix bug
      todo-search search 'tag:urgent NOT state:done'
      todo-search search 'path:"Projects/X" priority:high'
      todo-search search 'scheduled:2024-01-01..2024-01-31 OR deadline:overdue'
      todo-search search 'deadline:"next friday"' '[status:Draft OR Active]'

    \b
    Fields:
      path file tag state priority content scheduled deadline

    \b
    Output formats:
      --format table   Rich table (default)
      --format paths   One path:line per line (for piping)
      --format json    JSON array of task objects
    """
    if sort_col is not None and sort_col.lstrip("-") not in COLUMN_DEFS:
        error(
            f"Unknown sort column: {sort_col.lstrip('-')}",
            hint=f"Available: {', '.join(COLUMN_DEFS.keys())}",
        )
        raise SystemExit(EXIT_PARSE_ERROR)

    query_string = " ".join(query)

    try:
        parsed = parse_query(query_string)
    except SearchSyntaxError as e:
        print_caret(query_string, e.position)
        error(
            f"Invalid search query: {e.message}",
            hint="Run 'todo-search check --tokens' to inspect the query",
        )
        raise SystemExit(EXIT_PARSE_ERROR)
    debug(f"Parsed query: {parsed!r}")

    path = ctx.tasks_path(tasks_file)
    if path is None:
        error("No tasks file given", hint="Pass --tasks or set paths.tasks_file in the config")
        raise SystemExit(EXIT_TASKS_ERROR)

    try:
        tasks, properties = load_tasks(path)
    except TaskFileError as e:
        error(str(e))
        raise SystemExit(EXIT_TASKS_ERROR)
    verbose(f"Loaded {len(tasks)} tasks from {path}")

    settings = ctx.settings(reference_date=today.date() if today else None)
    overrides: dict = {}
    if week_start is not None:
        overrides["week_starts_on"] = week_start.lower()
    if strict:
        overrides["strict"] = True
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    if case_sensitive is None:
        case_sensitive = ctx.config.case_sensitive

    try:
        results = filter_tasks(
            tasks,
            parsed,
            case_sensitive=case_sensitive,
            settings=settings,
            properties_by_path=properties,
        )
    except EvaluationError as e:
        error(f"Cannot evaluate query: {e}")
        raise SystemExit(EXIT_PARSE_ERROR)

    if sort_col is not None:
        results = _sort_tasks(results, sort_col, settings.priority_synonyms)

    if limit is not None:
        results = results[:limit]

    if not results:
        if output_format == "json":
            click.echo("[]")
        elif not ctx.quiet:
            info(f"No results for: {query_string}")
        raise SystemExit(EXIT_NO_RESULTS)

    if output_format == "table":
        _print_table(results, query_string)
    elif output_format == "paths":
        _print_paths(results)
    elif output_format == "json":
        _print_json(results)

    raise SystemExit(EXIT_SUCCESS)


def _print_table(tasks: list[Task], query_string: str) -> None:
    """Print matching tasks as a table, paged when it is taller than the terminal."""
    info(f"Search: {query_string} ({len(tasks)} results)")

    table = create_table()
    for col, cdef in COLUMN_DEFS.items():
        table.add_column(
            cdef["header"],
            style=cdef["style"] or "",
            justify=cdef["justify"],
            no_wrap=col != "text",
        )
    for task in tasks:
        table.add_row(*(escape(_get_cell_value(task, col)) for col in COLUMN_DEFS))

    # Header row, rule and border stay visible in less
    pager_print(render(table), header_lines=3)


def _print_paths(tasks: list[Task]) -> None:
    """Print one path:line per task."""
    for task in tasks:
        click.echo(f"{task.path}:{task.line + 1}")


def _print_json(tasks: list[Task]) -> None:
    """Print results as JSON array."""
    click.echo(json.dumps([task.to_dict() for task in tasks], indent=2))
