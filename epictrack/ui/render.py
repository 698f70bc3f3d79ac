"""Terminal rendering of page views with rich."""

from typing import Protocol

from rich.console import Console
from rich.table import Table
from rich.text import Text

from epictrack.actions import commands_for
from epictrack.models import Epic, Status, Story
from epictrack.pages import EpicView, HomeView, StoryView, View

STATUS_STYLES = {
    Status.OPEN: "magenta",
    Status.IN_PROGRESS: "yellow",
    Status.RESOLVED: "green",
    Status.CLOSED: "blue",
}

# Column widths for list and detail tables
ID_WIDTH = 6
NAME_WIDTH = 32
DESCRIPTION_WIDTH = 27
STATUS_WIDTH = 13

COMMAND_STYLES = ["green", "yellow", "red", "blue", "magenta", "cyan"]


class Renderer(Protocol):
    """Displays resolved page data. The navigator never reads it back."""

    def render(self, view: View, breadcrumbs: str = "") -> None:
        ...

    def show_error(self, message: str) -> None:
        ...


def status_text(status: Status) -> Text:
    """Coloured status label."""
    return Text(status.label, style=STATUS_STYLES[status])


def truncate(text: str, width: int) -> str:
    """Fit text in width columns, ending with '...' when cut."""
    if len(text) <= width:
        return text
    if width <= 3:
        return "." * width
    return text[:width - 3] + "..."


def _summary_table(title: str) -> Table:
    table = Table(title=title, title_style="bold cyan", header_style="cyan", border_style="cyan")
    table.add_column("id", justify="right", width=ID_WIDTH)
    table.add_column("name", width=NAME_WIDTH, no_wrap=True)
    table.add_column("status", width=STATUS_WIDTH, no_wrap=True)
    return table


def _detail_table(title: str, entity_id: int, item: Epic | Story) -> Table:
    table = Table(title=title, title_style="bold cyan", header_style="cyan", border_style="cyan")
    table.add_column("id", justify="right", width=ID_WIDTH)
    table.add_column("name", width=NAME_WIDTH // 2, no_wrap=True)
    table.add_column("description", width=DESCRIPTION_WIDTH, no_wrap=True)
    table.add_column("status", width=STATUS_WIDTH, no_wrap=True)
    table.add_row(
        str(entity_id),
        Text(truncate(item.name, NAME_WIDTH // 2)),
        Text(truncate(item.description, DESCRIPTION_WIDTH)),
        status_text(item.status),
    )
    return table


def epic_list_table(epics: list[Epic]) -> Table:
    table = _summary_table("EPICS")
    for epic in epics:
        table.add_row(str(epic.id), Text(truncate(epic.name, NAME_WIDTH)), status_text(epic.status))
    return table


def story_list_table(stories: list[Story]) -> Table:
    table = _summary_table("STORIES")
    for story in stories:
        table.add_row(str(story.id), Text(truncate(story.name, NAME_WIDTH)), status_text(story.status))
    return table


def command_bar(hints: list[tuple[str, str]]) -> Text:
    """Footer like '[q] quit | [c] create epic'."""
    bar = Text()
    for i, (key, label) in enumerate(hints):
        if i:
            bar.append(" | ", style="cyan")
        bar.append(f"[{key}] {label}", style=COMMAND_STYLES[i % len(COMMAND_STYLES)])
    return bar


class ConsoleRenderer:
    """Draws one page per render, clearing the screen first.

    Errors reported between renders are shown above the next page so they
    are not wiped by the clear.
    """

    def __init__(self, console: Console | None = None, clear: bool = True):
        self.console = console or Console()
        self.clear = clear
        self._errors: list[str] = []

    def show_error(self, message: str) -> None:
        self._errors.append(message)

    def flush_errors(self) -> None:
        for message in self._errors:
            self.console.print(Text.assemble(("Error: ", "bold red"), message))
        self._errors.clear()

    def render(self, view: View, breadcrumbs: str = "") -> None:
        if self.clear:
            self.console.clear()
        self.flush_errors()
        if breadcrumbs:
            self.console.print(Text(breadcrumbs, style="dim"))

        if isinstance(view, HomeView):
            self.console.print(epic_list_table(view.epics))
        elif isinstance(view, EpicView):
            self.console.print(_detail_table("EPIC", view.epic.id, view.epic))
            self.console.print()
            self.console.print(story_list_table(view.stories))
        elif isinstance(view, StoryView):
            self.console.print(_detail_table("STORY", view.story.id, view.story))
        else:
            raise TypeError(f"Cannot render {type(view).__name__}")

        self.console.print()
        self.console.print(command_bar(commands_for(view.page)))
