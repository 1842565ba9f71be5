"""Terminal front end for the todo client.

This module provides the interactive application that:
1. Restores the stored token and fetches tasks on startup
2. Reads slash commands (or plain text, which creates a task)
3. Renders the task list, the current notice and inline edits with rich
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.table import Table
from rich.text import Text

from todo_client.cli.builtin_commands import BUILTIN_COMMANDS
from todo_client.cli.commands import CommandRegistry
from todo_client.config import TodoSettings, get_settings, validate_settings
from todo_client.errors import ConfigurationError, ValidationError
from todo_client.logging import Loggers, bind_context, clear_context, configure_logging
from todo_client.models import Notice, Task
from todo_client.session import TodoSession

logger = Loggers.cli()

PromptFunc = Callable[..., Awaitable[str]]


class SlashCommandCompleter(Completer):
    """Completer for slash commands."""

    def __init__(self, commands: list[str]) -> None:
        self.commands = commands

    def get_completions(self, document: Document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/") or " " in text:
            return
        prefix = text[1:]
        for name in sorted(self.commands):
            if name.startswith(prefix):
                yield Completion(f"/{name}", start_position=-len(text))


class TodoCLIApp:
    """Interactive task list.

    Args:
        settings: Application settings (defaults to get_settings()).
        session: Pre-built session, mainly for tests.
        console: Rich console to render to.
        prompt: Coroutine ``prompt(message, default="")`` used for input;
            defaults to a prompt_toolkit session.
    """

    def __init__(
        self,
        settings: TodoSettings | None = None,
        session: TodoSession | None = None,
        console: Console | None = None,
        prompt: PromptFunc | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.session = session or TodoSession.from_settings(self._settings)
        self.console = console or Console()
        self.command_registry = CommandRegistry()
        for command_cls in BUILTIN_COMMANDS:
            self.command_registry.register(command_cls())

        if prompt is None:
            prompt_session: PromptSession[str] = PromptSession(
                history=InMemoryHistory(),
                completer=SlashCommandCompleter(self.command_registry.get_completions()),
            )
            prompt = prompt_session.prompt_async
        self._prompt = prompt
        self._last_notice: Notice | None = None
        self.should_exit = False

    def stop(self) -> None:
        self.should_exit = True

    # ---- rendering ----

    def show(self, renderable: Any) -> None:
        self.console.print(renderable)

    def show_error(self, message: str) -> None:
        self.console.print(Text(message, style="red"))

    def show_notice(self) -> None:
        """Print the current notice if it has not been shown yet."""
        notice = self.session.notices.notice
        if notice is None or notice is self._last_notice:
            return
        self._last_notice = notice
        style = "red" if notice.is_error else "green"
        self.console.print(Text(notice.message, style=style))

    def render_tasks(self) -> Table:
        table = Table(title="To-Do", show_lines=False)
        table.add_column("#", justify="right", style="dim", no_wrap=True)
        table.add_column("Done", justify="center", no_wrap=True)
        table.add_column("Title")

        for position, task in enumerate(self.session.tasks, start=1):
            title = Text(task.title, style="strike dim" if task.completed else "")
            table.add_row(str(position), "x" if task.completed else "", title)
        return table

    def show_tasks(self) -> None:
        if len(self.session.tasks) == 0:
            self.console.print(Text("No tasks yet. Type a title to add one.", style="dim"))
            return
        self.show(self.render_tasks())

    def resolve_task(self, arg: str) -> Task | None:
        """Map a 1-based list position to a task, reporting bad input."""
        text = arg.strip()
        try:
            position = int(text)
        except ValueError:
            self.show_error(f"Expected a task number, got '{text}'.")
            return None
        tasks = self.session.tasks.tasks
        if not 1 <= position <= len(tasks):
            self.show_error(f"No task number {position}.")
            return None
        return tasks[position - 1]

    # ---- editing ----

    async def edit_interactively(self, task: Task) -> None:
        """Edit a title in place: Enter confirms, Ctrl-C cancels."""
        editor = self.session.editor
        if not await editor.start_edit(task.id, task.title):
            return
        try:
            text = await self._prompt("edit> ", default=editor.draft_title)
        except (KeyboardInterrupt, EOFError):
            editor.on_abort_key()
            logger.debug("edit_aborted", task_id=task.id)
            return
        editor.keystroke(text)
        await editor.on_commit_key()

    # ---- input handling ----

    async def process_input(self, user_input: str) -> None:
        text = user_input.strip()
        if not text:
            return
        if text.startswith("/"):
            await self._handle_command(text)
        elif self.session.is_authenticated:
            if await self.session.tasks.create_task(user_input):
                self.show_tasks()
        else:
            self.show_error("Not logged in. Use /login <token>.")
        self.show_notice()

    async def _handle_command(self, text: str) -> None:
        name, _, args = text[1:].partition(" ")
        command = self.command_registry.get(name)
        if command is None:
            self.show_error(f"Unknown command: /{name}. Type /help for a list.")
            return
        logger.debug("command_executing", command=command.name)
        try:
            await command.execute(args, self)
            logger.debug("command_completed", command=command.name)
        except ValidationError as e:
            self.show_error(e.message)
        except Exception as e:
            logger.exception("command_failed", command=command.name)
            self.show_error(f"Error executing command: {e}")

    async def run(self) -> None:
        """Run the main application loop."""
        logger.info("repl_starting", api_host=self._settings.api_host)
        bind_context(api_host=self._settings.api_host)

        try:
            if await self.session.restore():
                self.show_tasks()
            elif not self.session.is_authenticated:
                self.console.print(Text("Log in with /login <token>. /help lists commands.", style="dim"))

            while not self.should_exit:
                try:
                    user_input = await self._prompt("> ")
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break
                await self.process_input(user_input)
        finally:
            await self.session.aclose()
            logger.info("app_ending")
            clear_context()


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    configure_logging(settings)
    try:
        validate_settings(settings)
    except ConfigurationError as e:
        Console(stderr=True).print(Text(e.message, style="red"))
        raise SystemExit(2) from e
    asyncio.run(TodoCLIApp(settings).run())
