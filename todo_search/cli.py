"""Command-line interface for todo-search."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path

import click

from todo_search import __version__
from todo_search.config import Config, load_config
from todo_search.exceptions import ConfigError
from todo_search.search.evaluator import EvaluationSettings
from todo_search.utils.output import (
    error,
    set_color,
    set_pager,
    set_verbosity,
    warning,
)


class Context:
    """State shared by every subcommand through ``click``'s object."""

    def __init__(self) -> None:
        self.config: Config = Config()
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False

    def tasks_path(self, override: Path | None = None) -> Path | None:
        """The task export to read: *override*, else ``paths.tasks_file``."""
        if override is not None:
            return override.expanduser()
        return self.config.tasks_file

    def settings(self, reference_date: date | None = None) -> EvaluationSettings:
        return self.config.to_settings(reference_date=reference_date)


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config file (default: ~/.config/todo-search/config.toml)",
)
@click.option("--no-color", is_flag=True, default=False, help="Disable colored output")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Log parser and evaluator decisions to stderr (implies --verbose)",
)
@click.option("--quiet", "-q", is_flag=True, default=False, help="Suppress non-error output")
@click.option(
    "--pager/--no-pager",
    default=None,
    help="Force pager on/off for table output (default: auto-detect)",
)
@click.version_option(version=__version__, prog_name="todo-search")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
    pager: bool | None,
) -> None:
    """todo-search: Filter exported tasks with a boolean query language.

    Queries combine free text, field filters and property filters:

    \b
      todo-search search --tasks tasks.json 'tag:urgent NOT state:done'
      todo-search search 'path:"Projects/X" (scheduled:overdue OR deadline:today)'
      todo-search check 'priority:high AND ('

    Settings are read from ~/.config/todo-search/config.toml unless
    --config names another file.
    """
    app_ctx = ctx.ensure_object(Context)
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    set_verbosity(verbose=verbose, debug=debug)
    set_pager(pager)

    color = not no_color and "NO_COLOR" not in os.environ
    if not color:
        set_color(False)

    try:
        app_ctx.config, warnings = load_config(config_path)
    except ConfigError as e:
        error(str(e), hint="Fix the file or regenerate it with: todo-search init-config --force")
        ctx.exit(1)
        return

    if color and not app_ctx.config.colored_output:
        set_color(False)

    if not quiet:
        for message in warnings:
            warning(message)


@cli.command("help")
@click.argument("command", required=False, nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Show help for a command."""
    target: click.Command = cli
    for name in command:
        sub = cli.get_command(ctx, name) if target is cli else None
        if sub is None:
            error(f"Unknown command: {name}")
            ctx.exit(1)
            return
        target = sub
    click.echo(target.get_help(ctx))


def register_commands() -> None:
    """Attach every command found in :mod:`todo_search.commands`."""
    from todo_search.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


register_commands()
