"""Built-in slash commands for the todo CLI.

Tasks are addressed by their 1-based position in the list shown by /list.
"""

from typing import Any

from rich.panel import Panel
from rich.table import Table

from todo_client.cli.commands import Command, CommandCategory


def _require_login(app: Any) -> bool:
    if app.session.is_authenticated:
        return True
    app.show_error("Not logged in. Use /login <token>.")
    return False


class HelpCommand(Command):
    """Display help information about available commands."""

    def __init__(self) -> None:
        super().__init__(
            name="help",
            description="Show available commands and usage information",
            usage="/help [command]",
            examples=["/help", "/help edit"],
        )

    async def execute(self, args: str, app: Any) -> None:
        name = args.strip().lstrip("/")
        if name:
            cmd = app.command_registry.get(name)
            if cmd is None:
                app.show_error(f"Unknown command: /{name}")
                return
            app.show(Panel(cmd.get_help(), border_style="cyan"))
            return

        table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
        table.add_column("Command", style="bold cyan", no_wrap=True)
        table.add_column("Aliases", style="dim", no_wrap=True)
        table.add_column("Description")

        for category in CommandCategory:
            commands = app.command_registry.by_category(category)
            if not commands:
                continue
            table.add_row(f"[bold]{category.value.title()}[/bold]", "", "")
            for cmd in commands:
                aliases = ", ".join(f"/{a}" for a in cmd.aliases) if cmd.aliases else ""
                table.add_row(f"  /{cmd.name}", aliases, cmd.description)

        app.show(Panel(table, title="[bold]Available Commands[/bold]", border_style="cyan"))


class ListCommand(Command):
    """Show the task list."""

    def __init__(self) -> None:
        super().__init__(
            name="list",
            description="Show your tasks",
            aliases=["ls"],
            category=CommandCategory.TASKS,
        )

    async def execute(self, args: str, app: Any) -> None:
        if _require_login(app):
            app.show_tasks()


class AddCommand(Command):
    """Create a task."""

    def __init__(self) -> None:
        super().__init__(
            name="add",
            description="Create a task (plain text input does the same)",
            usage="/add <title>",
            examples=["/add Buy milk", "/add Call the plumber --urgent"],
            category=CommandCategory.TASKS,
        )

    async def execute(self, args: str, app: Any) -> None:
        if not _require_login(app):
            return
        # Title is sent exactly as typed, like plain-text input
        if await app.session.tasks.create_task(args):
            app.show_tasks()


class DoneCommand(Command):
    """Toggle completion of a task."""

    def __init__(self) -> None:
        super().__init__(
            name="done",
            description="Mark a task complete, or incomplete again",
            aliases=["toggle"],
            usage="/done <number>",
            examples=["/done 1"],
            category=CommandCategory.TASKS,
        )

    async def execute(self, args: str, app: Any) -> None:
        if not _require_login(app):
            return
        task = app.resolve_task(args)
        if task is None:
            return
        if await app.session.tasks.toggle_completion(task.id, task.completed, task.title):
            app.show_tasks()


class EditCommand(Command):
    """Edit a task's title."""

    def __init__(self) -> None:
        super().__init__(
            name="edit",
            description="Edit a task's title (Enter saves, Ctrl-C cancels)",
            usage="/edit <number> [--title <new title>]",
            examples=["/edit 1", '/edit 1 --title "Buy milk 2%"'],
            category=CommandCategory.TASKS,
        )

    async def execute(self, args: str, app: Any) -> None:
        if not _require_login(app):
            return
        parsed = self.parse_args(args)
        task = app.resolve_task(parsed.positional)
        if task is None:
            return

        title = parsed.get_option("title")
        if title is None:
            await app.edit_interactively(task)
        else:
            editor = app.session.editor
            await editor.start_edit(task.id, task.title)
            editor.keystroke(title)
            await editor.on_commit_key()
        app.show_tasks()


class DeleteCommand(Command):
    """Delete a task."""

    def __init__(self) -> None:
        super().__init__(
            name="rm",
            description="Delete a task",
            aliases=["delete"],
            usage="/rm <number>",
            examples=["/rm 2"],
            category=CommandCategory.TASKS,
        )

    async def execute(self, args: str, app: Any) -> None:
        if not _require_login(app):
            return
        task = app.resolve_task(args)
        if task is None:
            return
        if await app.session.tasks.delete_task(task.id):
            app.show_tasks()


class RefreshCommand(Command):
    """Re-fetch the task list."""

    def __init__(self) -> None:
        super().__init__(
            name="refresh",
            description="Fetch the task list from the server again",
            category=CommandCategory.TASKS,
        )

    async def execute(self, args: str, app: Any) -> None:
        if not _require_login(app):
            return
        if await app.session.tasks.refresh():
            app.show_tasks()
        else:
            app.show_error("Could not refresh tasks; see the log for details.")


class LoginCommand(Command):
    """Store an auth token."""

    def __init__(self) -> None:
        super().__init__(
            name="login",
            description="Log in with a token issued by the service",
            usage="/login <token>",
            category=CommandCategory.SESSION,
        )

    async def execute(self, args: str, app: Any) -> None:
        token = self.parse_args(args).positional
        if not token:
            app.show_error("Usage: /login <token>")
            return
        await app.session.login(token, notice="Successfully logged in.")
        app.show_tasks()


class LogoutCommand(Command):
    """Forget the auth token."""

    def __init__(self) -> None:
        super().__init__(
            name="logout",
            description="Log out and forget the stored token",
            category=CommandCategory.SESSION,
        )

    async def execute(self, args: str, app: Any) -> None:
        app.session.logout()


class StatusCommand(Command):
    """Show connection and session status."""

    def __init__(self) -> None:
        super().__init__(
            name="status",
            description="Show server, login and task count",
            category=CommandCategory.SESSION,
        )

    async def execute(self, args: str, app: Any) -> None:
        session = app.session
        table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
        table.add_column("Key", style="bold cyan", no_wrap=True)
        table.add_column("Value")

        table.add_row("Server", session.client.base_url)
        if session.is_authenticated:
            table.add_row("Session", "[green]Logged in[/green]")
            done = sum(1 for task in session.tasks if task.completed)
            table.add_row("Tasks", f"{len(session.tasks)} ({done} done)")
        else:
            table.add_row("Session", "[yellow]Logged out[/yellow]")
        table.add_row("Token file", str(session.credentials.path))

        app.show(Panel(table, title="[bold]Status[/bold]", border_style="cyan"))


class ExitCommand(Command):
    """Exit the application."""

    def __init__(self) -> None:
        super().__init__(
            name="exit",
            description="Exit the application",
            aliases=["quit"],
        )

    async def execute(self, args: str, app: Any) -> None:
        app.stop()


BUILTIN_COMMANDS: list[type[Command]] = [
    HelpCommand,
    ListCommand,
    AddCommand,
    DoneCommand,
    EditCommand,
    DeleteCommand,
    RefreshCommand,
    LoginCommand,
    LogoutCommand,
    StatusCommand,
    ExitCommand,
]
