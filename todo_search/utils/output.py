"""Terminal output for todo-search: themed consoles, messages and paging."""

from __future__ import annotations

import io
import logging
import os
import shutil
import subprocess
import sys
from typing import Any

from rich.console import Console, RenderableType
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

# Set once by the CLI group callback
_verbose_enabled: bool = False
_debug_enabled: bool = False

# None = page only when stdout is a TTY and output is taller than it
_pager_mode: bool | None = None

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "path": "blue",
        "task.state": "bold magenta",
        "task.priority": "bold yellow",
        "task.date": "green",
        "query.caret": "bold red",
        "token.type": "cyan",
    }
)

# Results go to stdout, diagnostics to stderr
console = Console(theme=THEME, stderr=False)
error_console = Console(theme=THEME, stderr=True)


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Set the verbose/debug flags. ``debug`` implies ``verbose``.

    With *debug*, records from the ``todo_search`` loggers (parser,
    evaluator, task loading) are shown on stderr.
    """
    global _verbose_enabled, _debug_enabled
    _verbose_enabled = verbose or debug
    _debug_enabled = debug

    if debug:
        setup_logging(logging.DEBUG)


def setup_logging(level: int = logging.WARNING) -> None:
    """Route ``todo_search`` log records to the error console."""
    logger = logging.getLogger("todo_search")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=error_console, show_path=False, rich_tracebacks=True)
        )


def set_color(enabled: bool) -> None:
    console.no_color = not enabled
    error_console.no_color = not enabled


def set_pager(mode: bool | None) -> None:
    """Set pager mode: True always, False never, None auto."""
    global _pager_mode
    _pager_mode = mode


def render(renderable: RenderableType, *, min_width: int = 120) -> str:
    """Render *renderable* to a string with the stdout console's color setting.

    Tables are rendered at least *min_width* wide so task text is not
    squeezed when output is piped.
    """
    buf = io.StringIO()
    Console(
        file=buf,
        theme=THEME,
        force_terminal=not console.no_color,
        no_color=console.no_color,
        width=max(console.width, min_width),
    ).print(renderable)
    return buf.getvalue()


def _pager_command(header_lines: int) -> list[str]:
    """``$PAGER`` if set, else ``less -RFS`` with a sticky header."""
    pager_env = os.environ.get("PAGER")
    if pager_env:
        return pager_env.split()
    cmd = ["less", "-RFS"]
    if header_lines > 0:
        cmd.append(f"--header={header_lines}")
    return cmd


def pager_print(content: str, *, header_lines: int = 0) -> None:
    """Write pre-rendered *content* to stdout, through a pager when enabled.

    Falls back to plain output if the pager cannot be started.
    """
    use_pager = _pager_mode
    if use_pager is None:
        use_pager = (
            sys.stdout.isatty()
            and content.count("\n") > shutil.get_terminal_size().lines
        )

    if use_pager:
        env = dict(os.environ)
        env.setdefault("LESSCHARSET", "utf-8")
        try:
            proc = subprocess.Popen(
                _pager_command(header_lines),
                stdin=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                env=env,
            )
            proc.communicate(input=content)
            return
        except (OSError, subprocess.SubprocessError):
            pass

    sys.stdout.write(content)
    sys.stdout.flush()


def info(message: str) -> None:
    console.print(f"[info]{escape(message)}[/info]")


def warning(message: str) -> None:
    """Print a warning to stderr."""
    error_console.print(f"[warning]Warning:[/warning] {escape(message)}", highlight=False)


def error(message: str, hint: str | None = None) -> None:
    """Print an error to stderr, optionally followed by a hint line."""
    error_console.print(f"[error]Error:[/error] {escape(message)}", highlight=False)
    if hint:
        error_console.print(f"  [info]Hint:[/info] {escape(hint)}", highlight=False)


def success(message: str) -> None:
    console.print(f"[success]{escape(message)}[/success]")


def verbose(message: str) -> None:
    """Print *message* only in verbose mode."""
    if _verbose_enabled:
        console.print(f"[info]{escape(message)}[/info]")


def debug(message: str) -> None:
    """Print *message* to stderr only in debug mode."""
    if _debug_enabled:
        error_console.print(f"[warning]\\[DEBUG][/warning] {escape(message)}")


def print_caret(text: str, position: int, indent: int = 2) -> None:
    """Echo *text* to stderr with a caret under character *position*."""
    position = min(max(position, 0), len(text))
    pad = " " * indent
    error_console.print(f"{pad}{escape(text)}", highlight=False)
    error_console.print(f"{pad}{' ' * position}[query.caret]^[/query.caret]")


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    """Create a table with bold headers unless overridden."""
    kwargs.setdefault("show_header", True)
    kwargs.setdefault("header_style", "bold")
    return Table(title=title, **kwargs)
