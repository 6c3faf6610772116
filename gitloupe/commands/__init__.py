"""
Commands — One module per subcommand, registered at parser build time

A command module provides:
    COMMAND_NAME                  subcommand name
    register_parser(subparsers)   adds its argparse subparser
    handle(cli, args) -> int      runs it and returns the exit status

plus the XxxCommand class (a BaseCommand) that does the work.
"""

import importlib
import logging
from typing import Any, Callable, Dict, List

from .base import BaseCommand


logger = logging.getLogger(__name__)

# Help lists subcommands in this order
COMMAND_MODULES = (
    'list_cmd',
    'show_cmd',
    'stats_cmd',
    'export_cmd',
    'check_cmd',
    'config_cmd',
)

_handlers: Dict[str, Callable[[Any, Any], int]] = {}


def register_all(subparsers) -> None:
    """Add every command's subparser and remember its handler."""
    _handlers.clear()
    for module_name in COMMAND_MODULES:
        module = importlib.import_module(f'.{module_name}', __package__)
        module.register_parser(subparsers)
        _handlers[module.COMMAND_NAME] = module.handle
    logger.debug("Registered commands: %s", ", ".join(_handlers))


def dispatch(command: str, cli: Any, args: Any) -> int:
    """
    Run a registered command.

    Raises:
        KeyError: If no module registered the command
    """
    try:
        handler = _handlers[command]
    except KeyError:
        raise KeyError(f"Unknown command: {command}. Available: {', '.join(_handlers)}")
    return handler(cli, args) or 0


def get_registered_commands() -> List[str]:
    return list(_handlers)


__all__ = ['BaseCommand', 'register_all', 'dispatch', 'get_registered_commands']
