"""Subcommands of the ``todo-search`` CLI.

Each public module in this package exposes its command as ``cli``.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil

import click

logger = logging.getLogger(__name__)


def discover_commands() -> list[click.Command]:
    """Import every public submodule and collect its ``cli`` command."""
    commands: list[click.Command] = []
    for module_info in pkgutil.iter_modules(__path__, prefix=f"{__name__}."):
        if module_info.name.rsplit(".", 1)[-1].startswith("_"):
            continue
        module = importlib.import_module(module_info.name)
        command = getattr(module, "cli", None)
        if isinstance(command, click.Command):
            logger.debug("Registered command %s from %s", command.name, module_info.name)
            commands.append(command)
    return commands
