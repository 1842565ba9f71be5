"""Slash command registry and base command class.

Example of creating a custom command:

    from todo_client.cli.commands import Command, CommandCategory

    class ClearDoneCommand(Command):
        '''Delete every completed task.'''

        def __init__(self):
            super().__init__(
                name="clear-done",
                description="Delete completed tasks",
                category=CommandCategory.TASKS,
            )

        async def execute(self, args: str, app: Any) -> None:
            for task in app.session.tasks:
                if task.completed:
                    await app.session.tasks.delete_task(task.id)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar
import re

T = TypeVar("T")


class CommandCategory(Enum):
    """Categories for organizing commands."""

    GENERAL = "general"
    TASKS = "tasks"
    SESSION = "session"


@dataclass
class ParsedArgs:
    """Parsed command arguments.

    Provides easy access to positional arguments and options.
    """

    positional: str
    """Positional arguments (everything not an option)."""

    options: dict[str, str] = field(default_factory=dict)
    """Named options (--key=value or --flag)."""

    def get_option(
        self,
        name: str,
        default: T = None,
        type_converter: Callable[[str], T] = str,
    ) -> T:
        """Get an option value with type conversion.

        Args:
            name: Option name (without --)
            default: Default value if option not provided
            type_converter: Function to convert string value to desired type

        Returns:
            Option value converted to specified type, or default
        """
        value = self.options.get(name)
        if value is None:
            return default
        try:
            return type_converter(value)
        except (ValueError, TypeError):
            return default


class Command(ABC):
    """Base class for slash commands.

    Subclass this and override execute() to implement command behavior.
    """

    def __init__(
        self,
        name: str,
        description: str,
        aliases: list[str] | None = None,
        usage: str | None = None,
        examples: list[str] | None = None,
        category: CommandCategory = CommandCategory.GENERAL,
    ) -> None:
        """Initialize the command.

        Args:
            name: Command name (used as /name)
            description: Short description of what the command does
            aliases: Alternative names for the command
            usage: Usage string showing syntax (e.g., "/cmd <arg> [--opt]")
            examples: List of example usages
            category: Category for organizing in help
        """
        self.name = name
        self.description = description
        self.aliases = aliases or []
        self.usage = usage or f"/{name}"
        self.examples = examples or []
        self.category = category

    @abstractmethod
    async def execute(self, args: str, app: Any) -> None:
        """Execute the command with given arguments.

        Args:
            args: Command arguments string (everything after the command name)
            app: The CLI application instance
        """
        pass

    def parse_args(self, args: str) -> ParsedArgs:
        """Parse command arguments into structured form.

        Parses options in the forms ``--key=value``, ``--key value`` and
        ``--flag``. Everything else is positional. Quoted strings are kept
        together so task titles can contain spaces.
        """
        options: dict[str, str] = {}
        positional_parts: list[str] = []

        parts = self._tokenize(args)

        i = 0
        while i < len(parts):
            part = parts[i]

            if part.startswith("--"):
                key = part[2:]

                if "=" in key:
                    key, value = key.split("=", 1)
                    options[key] = value
                elif i + 1 < len(parts) and not parts[i + 1].startswith("-"):
                    options[key] = parts[i + 1]
                    i += 1
                else:
                    options[key] = "true"
            else:
                positional_parts.append(part)

            i += 1

        return ParsedArgs(
            positional=" ".join(positional_parts),
            options=options,
        )

    def _tokenize(self, args: str) -> list[str]:
        """Tokenize argument string respecting quotes."""
        pattern = r'"[^"]*"|\'[^\']*\'|\S+'
        tokens = re.findall(pattern, args)

        def strip_quotes(token: str) -> str:
            if len(token) >= 2 and token[0] in "\"'" and token[0] == token[-1]:
                return token[1:-1]
            return token

        return [strip_quotes(token) for token in tokens]

    def get_help(self) -> str:
        """Get detailed help text for this command."""
        lines = [
            f"/{self.name}",
            f"  {self.description}",
            "",
            f"Usage: {self.usage}",
        ]

        if self.aliases:
            lines.append(f"Aliases: {', '.join(f'/{a}' for a in self.aliases)}")

        if self.examples:
            lines.append("")
            lines.append("Examples:")
            for example in self.examples:
                lines.append(f"  {example}")

        return "\n".join(lines)


class CommandRegistry:
    """Registry for managing slash commands."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}
        self._categories: dict[CommandCategory, list[Command]] = {
            cat: [] for cat in CommandCategory
        }

    def register(self, command: Command) -> None:
        """Register a command and its aliases."""
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

        if command not in self._categories[command.category]:
            self._categories[command.category].append(command)

    def get(self, name: str) -> Command | None:
        """Get a command by name or alias."""
        return self._commands.get(name)

    def all_commands(self) -> list[Command]:
        """Get all unique commands (excluding aliases)."""
        seen: set[str] = set()
        commands: list[Command] = []
        for cmd in self._commands.values():
            if cmd.name not in seen:
                seen.add(cmd.name)
                commands.append(cmd)
        return commands

    def by_category(self, category: CommandCategory) -> list[Command]:
        return self._categories.get(category, [])

    def get_completions(self) -> list[str]:
        """Get all command names and aliases for auto-completion."""
        return list(self._commands.keys())
