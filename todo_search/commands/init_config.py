"""Write a starter configuration file."""

from __future__ import annotations

import json
import re
from importlib import resources
from pathlib import Path

import click

from todo_search.cli import Context, pass_context
from todo_search.config import get_default_config_path
from todo_search.utils.fileops import secure_mkdir, secure_write_text
from todo_search.utils.output import error, info, success

_TASKS_FILE_LINE = re.compile(r"^# tasks_file = .*$", re.MULTILINE)


def _load_example_config() -> str:
    """Return the bundled ``config.example.toml``."""
    return resources.files("todo_search").joinpath("config.example.toml").read_text()


def _render_config(tasks_file: Path | None) -> str:
    """The example config, with ``paths.tasks_file`` filled in when given."""
    content = _load_example_config()
    if tasks_file is None:
        return content
    # JSON string escapes are valid in TOML basic strings
    line = f"tasks_file = {json.dumps(str(tasks_file))}"
    return _TASKS_FILE_LINE.sub(lambda _: line, content, count=1)


@click.command("init-config")
@click.option("--force", "-f", is_flag=True, default=False, help="Overwrite an existing file")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the file (default: ~/.config/todo-search/config.toml)",
)
@click.option(
    "--tasks-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Set paths.tasks_file to this JSON task export",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None, tasks_file: Path | None) -> None:
    """Create a configuration file listing every option with its default.

    \b
    Examples:
      todo-search init-config
      todo-search init-config --tasks-file ~/notes/.tasks.json
      todo-search init-config --output ./todo-search.toml --force
    """
    config_path = (output or get_default_config_path()).expanduser().resolve()

    if config_path.exists() and not force:
        error(f"Config file already exists: {config_path}", hint="Use --force to overwrite")
        raise SystemExit(1)

    if tasks_file is not None:
        tasks_file = tasks_file.expanduser().resolve()

    try:
        secure_mkdir(config_path.parent)
        secure_write_text(config_path, _render_config(tasks_file))
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    success(f"Created config file: {config_path}")
    if tasks_file is None and not ctx.quiet:
        info("Set paths.tasks_file to your task export to search without --tasks.")
