"""Page navigation state machine using the transitions library.

The navigator owns a stack of pages. The kind of the page on top of the
stack is mirrored by a transitions.Machine, so only moves that make sense
from the current page are accepted:

    home --open_epic--> epic_detail --open_story--> story_detail
    story_detail --go_back--> epic_detail --go_back--> home
    home --go_back--> home (no-op)
    any open page --quit--> closed (stack cleared)

Usage:
    from epictrack.navigator import Navigator

    nav = Navigator(db, prompts, renderer)
    nav.run()  # Render, prompt, dispatch until the user quits
"""

import logging

from transitions import Machine

from epictrack.actions import (
    Action,
    CreateEpic,
    CreateStory,
    DeleteEpic,
    DeleteStory,
    EditEpicDescription,
    EditStoryDescription,
    Exit,
    NavigateToEpicDetail,
    NavigateToPreviousPage,
    NavigateToStoryDetail,
    UpdateEpicStatus,
    UpdateStoryStatus,
    parse_input,
)
from epictrack.db import TrackerDatabase
from epictrack.errors import NotFound, TrackerError
from epictrack.pages import (
    EpicDetail,
    EpicView,
    Home,
    HomeView,
    Page,
    StoryDetail,
    StoryView,
    View,
)
from epictrack.ui.prompts import Prompts
from epictrack.ui.render import Renderer

logger = logging.getLogger(__name__)


OPEN_STATES = ["home", "epic_detail", "story_detail"]
STATES = OPEN_STATES + ["closed"]

# Each trigger becomes a method on the Navigator
TRANSITIONS = [
    {"trigger": "open_epic", "source": "home", "dest": "epic_detail", "before": "_push_page"},
    {"trigger": "open_story", "source": "epic_detail", "dest": "story_detail", "before": "_push_page"},
    {"trigger": "go_back", "source": "story_detail", "dest": "epic_detail", "before": "_pop_page"},
    {"trigger": "go_back", "source": "epic_detail", "dest": "home", "before": "_pop_page"},
    {"trigger": "go_back", "source": "home", "dest": None},  # Internal: already at the bottom
    {"trigger": "quit", "source": OPEN_STATES, "dest": "closed", "before": "_clear_pages"},
]

DELETE_EPIC_MESSAGE = (
    "Are you sure you want to delete this epic? "
    "All stories in this epic will also be deleted"
)
DELETE_STORY_MESSAGE = "Are you sure you want to delete this story?"


class InvalidNavigation(TrackerError):
    """Raised when an action does not apply to the current page."""

    def __init__(self, state: str, trigger: str):
        self.state = state
        self.trigger = trigger
        super().__init__(f"Cannot {trigger.replace('_', ' ')} from {state.replace('_', ' ')}")


class Navigator:
    """Stack of pages plus the action dispatcher for one session."""

    def __init__(self, db: TrackerDatabase, prompts: Prompts, renderer: Renderer):
        self.db = db
        self.prompts = prompts
        self.renderer = renderer
        self._pages: list[Page] = [Home()]

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="home",
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="_on_state_change",
        )

    # --- stack -----------------------------------------------------------

    @property
    def pages(self) -> tuple[Page, ...]:
        """Snapshot of the page stack, bottom first."""
        return tuple(self._pages)

    @property
    def current_page(self) -> Page | None:
        """Top of the stack, or None once the session has quit."""
        return self._pages[-1] if self._pages else None

    def breadcrumbs(self) -> str:
        """Path like 'Home > Epic 1 > Story 2'."""
        return " > ".join(page.label() for page in self._pages)

    def _push_page(self, event) -> None:
        self._pages.append(event.kwargs["page"])

    def _pop_page(self, event) -> None:
        self._pages.pop()

    def _clear_pages(self, event) -> None:
        self._pages.clear()

    def _on_state_change(self, event) -> None:
        """Log every transition, including the no-op go_back on home."""
        source = event.transition.source
        dest = event.transition.dest or source
        logger.info(f"[NAV] {source} -> {dest} ({event.event.name})")

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def _fire(self, trigger: str, **kwargs) -> None:
        if not self.can(trigger):
            raise InvalidNavigation(self.state, trigger)
        getattr(self, trigger)(**kwargs)

    # --- views -----------------------------------------------------------

    def resolve_view(self, page: Page) -> View:
        """Read the data a page displays.

        Raises:
            NotFound: If the page's epic or story no longer exists
        """
        if isinstance(page, Home):
            return HomeView(page=page, epics=[epic for _, epic in self.db.read_db().list_epics()])
        if isinstance(page, EpicDetail):
            epic, stories = self.db.read_epic_stories(page.epic_id)
            return EpicView(page=page, epic=epic, stories=stories)
        return StoryView(page=page, story=self.db.read_story(page.story_id))

    # --- actions ---------------------------------------------------------

    def handle_action(self, action: Action) -> None:
        """Run one action against the database and update the stack.

        Raises:
            TrackerError: The action failed; the stack is unchanged
        """
        if self.is_closed():
            raise InvalidNavigation(self.state, type(action).__name__)

        page = self.current_page

        if isinstance(action, NavigateToEpicDetail):
            if not self.can("open_epic"):
                raise InvalidNavigation(self.state, "open_epic")
            self.db.read_epic(action.epic_id)
            self.open_epic(page=EpicDetail(action.epic_id))

        elif isinstance(action, NavigateToStoryDetail):
            if not self.can("open_story"):
                raise InvalidNavigation(self.state, "open_story")
            epic = self.db.read_epic(action.epic_id)
            if action.story_id not in epic.story_ids:
                raise NotFound("story", action.story_id, f"not in epic {action.epic_id}")
            self.open_story(page=StoryDetail(action.epic_id, action.story_id))

        elif isinstance(action, NavigateToPreviousPage):
            self._fire("go_back")

        elif isinstance(action, CreateEpic):
            name = self.prompts.get_text("Epic Name")
            description = self.prompts.get_text("Epic Description")
            self.db.create_epic(name, description)

        elif isinstance(action, CreateStory):
            self.db.read_epic(action.epic_id)
            name = self.prompts.get_text("Story Name")
            description = self.prompts.get_text("Story Description")
            self.db.create_story(action.epic_id, name, description)

        elif isinstance(action, UpdateEpicStatus):
            self.db.read_epic(action.epic_id)
            self.db.update_epic_status(action.epic_id, self.prompts.get_status_choice())

        elif isinstance(action, UpdateStoryStatus):
            self.db.read_story(action.story_id)
            self.db.update_story_status(action.story_id, self.prompts.get_status_choice())

        elif isinstance(action, EditEpicDescription):
            self.db.read_epic(action.epic_id)
            description = self.prompts.get_text("New Description")
            self.db.update_epic_description(action.epic_id, description)

        elif isinstance(action, EditStoryDescription):
            self.db.read_story(action.story_id)
            description = self.prompts.get_text("New Description")
            self.db.update_story_description(action.story_id, description)

        elif isinstance(action, DeleteEpic):
            self.db.read_epic(action.epic_id)
            if not self.prompts.confirm(DELETE_EPIC_MESSAGE):
                return
            self.db.delete_epic(action.epic_id)
            if page == EpicDetail(action.epic_id):
                self._fire("go_back")

        elif isinstance(action, DeleteStory):
            self.db.read_story(action.story_id)
            if not self.prompts.confirm(DELETE_STORY_MESSAGE):
                return
            self.db.delete_story(action.story_id, action.epic_id)
            if page == StoryDetail(action.epic_id, action.story_id):
                self._fire("go_back")

        elif isinstance(action, Exit):
            self._fire("quit")

        else:
            raise ValueError(f"Unknown action: {action!r}")

    # --- session loop ----------------------------------------------------

    def step(self) -> bool:
        """Render the current page, read one command and run it.

        Errors are reported to the renderer and never end the session.

        Returns:
            True while the session is still open
        """
        page = self.current_page
        if page is None:
            return False

        try:
            view = self.resolve_view(page)
        except NotFound as e:
            # Stale page: its entity is gone, fall back one level
            logger.warning(f"[NAV] {page.label()} is stale: {e}")
            self.renderer.show_error(str(e))
            self._fire("go_back")
            return True
        except TrackerError as e:
            logger.error(f"[NAV] Could not load {page.label()}: {e}")
            self.renderer.show_error(str(e))
            view = None

        if view is not None:
            self.renderer.render(view, self.breadcrumbs())

        raw = self.prompts.get_command()
        action = parse_input(page, raw)
        if action is None:
            logger.debug(f"[NAV] Ignoring input {raw!r} on {page.label()}")
            return True

        try:
            self.handle_action(action)
        except TrackerError as e:
            logger.warning(f"[NAV] {type(action).__name__} failed: {e}")
            self.renderer.show_error(str(e))

        return not self.is_closed()

    def run(self) -> None:
        """Loop until the user quits."""
        while self.step():
            pass
