"""
Commands the user can issue from each page.

parse_input() maps a raw command string to an Action for the current
page, or None if the input means nothing there. It only parses: whether
an ID exists is checked by the navigator when the action runs.
"""

from dataclasses import dataclass

from epictrack.pages import EpicDetail, Home, Page, StoryDetail


class Action:
    """Base class for navigator actions."""


@dataclass(frozen=True)
class NavigateToEpicDetail(Action):
    epic_id: int


@dataclass(frozen=True)
class NavigateToStoryDetail(Action):
    epic_id: int
    story_id: int


@dataclass(frozen=True)
class NavigateToPreviousPage(Action):
    pass


@dataclass(frozen=True)
class CreateEpic(Action):
    pass


@dataclass(frozen=True)
class UpdateEpicStatus(Action):
    epic_id: int


@dataclass(frozen=True)
class EditEpicDescription(Action):
    epic_id: int


@dataclass(frozen=True)
class DeleteEpic(Action):
    epic_id: int


@dataclass(frozen=True)
class CreateStory(Action):
    epic_id: int


@dataclass(frozen=True)
class UpdateStoryStatus(Action):
    story_id: int


@dataclass(frozen=True)
class EditStoryDescription(Action):
    story_id: int


@dataclass(frozen=True)
class DeleteStory(Action):
    epic_id: int
    story_id: int


@dataclass(frozen=True)
class Exit(Action):
    pass


# Footer hints shown under each page, in display order
HOME_COMMANDS = [
    ("q", "quit"),
    ("c", "create epic"),
    (":id:", "navigate to epic"),
    ("d :id:", "delete epic"),
]

EPIC_COMMANDS = [
    ("p", "previous"),
    ("u", "update epic"),
    ("e", "edit description"),
    ("d", "delete epic"),
    ("c", "create story"),
    (":id:", "navigate to story"),
    ("d :id:", "delete story"),
    ("q", "quit"),
]

STORY_COMMANDS = [
    ("p", "previous"),
    ("u", "update story"),
    ("e", "edit description"),
    ("d", "delete story"),
    ("q", "quit"),
]


def _parse_id(token: str) -> int | None:
    """Parse a positive integer ID; None for anything else."""
    if token.isdigit() and token.isascii():
        value = int(token)
        if value > 0:
            return value
    return None


def _parse_home(command: str, args: list[str]) -> Action | None:
    if not args:
        if command == "q":
            return Exit()
        if command == "c":
            return CreateEpic()
        epic_id = _parse_id(command)
        if epic_id is not None:
            return NavigateToEpicDetail(epic_id)
    elif command == "d" and len(args) == 1:
        epic_id = _parse_id(args[0])
        if epic_id is not None:
            return DeleteEpic(epic_id)
    return None


def _parse_epic_detail(page: EpicDetail, command: str, args: list[str]) -> Action | None:
    if not args:
        simple = {
            "p": NavigateToPreviousPage(),
            "u": UpdateEpicStatus(page.epic_id),
            "e": EditEpicDescription(page.epic_id),
            "d": DeleteEpic(page.epic_id),
            "c": CreateStory(page.epic_id),
            "q": Exit(),
        }
        if command in simple:
            return simple[command]
        story_id = _parse_id(command)
        if story_id is not None:
            return NavigateToStoryDetail(page.epic_id, story_id)
    elif command == "d" and len(args) == 1:
        story_id = _parse_id(args[0])
        if story_id is not None:
            return DeleteStory(page.epic_id, story_id)
    return None


def _parse_story_detail(page: StoryDetail, command: str, args: list[str]) -> Action | None:
    if args:
        return None
    simple = {
        "p": NavigateToPreviousPage(),
        "u": UpdateStoryStatus(page.story_id),
        "e": EditStoryDescription(page.story_id),
        "d": DeleteStory(page.epic_id, page.story_id),
        "q": Exit(),
    }
    return simple.get(command)


def parse_input(page: Page, raw: str) -> Action | None:
    """Parse a raw command for the given page.

    Surrounding whitespace is ignored; commands are case-sensitive.
    """
    tokens = raw.split()
    if not tokens:
        return None
    command, args = tokens[0], tokens[1:]

    if isinstance(page, Home):
        return _parse_home(command, args)
    if isinstance(page, EpicDetail):
        return _parse_epic_detail(page, command, args)
    if isinstance(page, StoryDetail):
        return _parse_story_detail(page, command, args)
    return None


def commands_for(page: Page) -> list[tuple[str, str]]:
    """Footer hints for a page."""
    if isinstance(page, Home):
        return HOME_COMMANDS
    if isinstance(page, EpicDetail):
        return EPIC_COMMANDS
    return STORY_COMMANDS
