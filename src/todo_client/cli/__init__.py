"""Terminal front end for the todo client."""

from todo_client.cli.app import TodoCLIApp
from todo_client.cli.commands import Command, CommandCategory, CommandRegistry, ParsedArgs

__all__ = [
    "TodoCLIApp",
    "Command",
    "CommandCategory",
    "CommandRegistry",
    "ParsedArgs",
]
