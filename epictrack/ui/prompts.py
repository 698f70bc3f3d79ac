"""Blocking user prompts for the interactive session."""

from typing import IO, Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt

from epictrack.models import STATUS_CHOICES, Status

SEPARATOR = "----------------------------"


class Prompts(Protocol):
    """Input the navigator asks for while running actions."""

    def get_command(self) -> str:
        """Read the next page command."""
        ...

    def get_text(self, label: str) -> str:
        """Read one line of free text."""
        ...

    def get_status_choice(self) -> Status:
        """Read a status selection."""
        ...

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question; anything but yes is no."""
        ...


class ConsolePrompts:
    """Prompts backed by rich.prompt.

    Args:
        console: Console to print prompts on
        stream: Optional input stream (stdin when None)
    """

    def __init__(self, console: Console | None = None, stream: IO[str] | None = None):
        self.console = console or Console()
        self.stream = stream

    def get_command(self) -> str:
        return Prompt.ask(
            "[bold]>[/bold]", console=self.console, default="", show_default=False, stream=self.stream
        ).strip()

    def get_text(self, label: str) -> str:
        self.console.print(SEPARATOR)
        return Prompt.ask(
            label, console=self.console, default="", show_default=False, stream=self.stream
        ).strip()

    def get_status_choice(self) -> Status:
        self.console.print(SEPARATOR)
        choice = Prompt.ask(
            "New Status (1 - OPEN, 2 - IN-PROGRESS, 3 - RESOLVED, 4 - CLOSED)",
            console=self.console,
            choices=list(STATUS_CHOICES),
            show_choices=False,
            stream=self.stream,
        )
        return STATUS_CHOICES[choice]

    def confirm(self, message: str) -> bool:
        self.console.print(SEPARATOR)
        return Confirm.ask(message, console=self.console, default=False, stream=self.stream)
