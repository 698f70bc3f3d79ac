"""Tests for epictrack.navigator module."""

from unittest.mock import MagicMock, patch

import pytest

from epictrack.actions import (
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
)
from epictrack.db import TrackerDatabase
from epictrack.errors import NotFound, ParseError, ValidationError
from epictrack.models import Status
from epictrack.navigator import (
    STATES,
    TRANSITIONS,
    InvalidNavigation,
    Navigator,
)
from epictrack.pages import EpicDetail, EpicView, Home, HomeView, StoryDetail, StoryView
from epictrack.ui.prompts import ConsolePrompts
from epictrack.ui.render import ConsoleRenderer


@pytest.fixture
def db(tmp_path):
    return TrackerDatabase(tmp_path / "db.json")


@pytest.fixture
def prompts():
    return MagicMock(spec=ConsolePrompts)


@pytest.fixture
def renderer():
    return MagicMock(spec=ConsoleRenderer)


@pytest.fixture
def nav(db, prompts, renderer):
    return Navigator(db, prompts, renderer)


@pytest.fixture
def seeded(db):
    """Epic 1 with stories 2 and 3, epic 4 with no stories."""
    db.create_epic("Launch", "v1")
    db.create_story(1, "Write docs")
    db.create_story(1, "Ship")
    db.create_epic("Later")
    return db


class TestNavigatorStates:
    """Tests for the state machine definition."""

    def test_states(self):
        """One state per page kind plus closed."""
        assert set(STATES) == {"home", "epic_detail", "story_detail", "closed"}

    def test_go_back_on_home_is_internal(self):
        """go_back from home has no destination."""
        home_back = [t for t in TRANSITIONS if t["trigger"] == "go_back" and t["source"] == "home"]
        assert home_back == [{"trigger": "go_back", "source": "home", "dest": None}]

    def test_initial_state(self, nav):
        """A new navigator is on Home."""
        assert nav.state == "home"
        assert nav.pages == (Home(),)
        assert nav.current_page == Home()

    def test_available_triggers_on_home(self, nav):
        """Only home's moves are allowed."""
        assert nav.can("open_epic")
        assert nav.can("go_back")
        assert nav.can("quit")
        assert not nav.can("open_story")


class TestNavigation:
    """Push/pop behaviour."""

    def test_select_then_back(self, nav, seeded):
        """[Home] -> select 1 -> [Home, Epic 1] -> back -> [Home] -> back -> [Home]."""
        nav.handle_action(NavigateToEpicDetail(1))
        assert nav.pages == (Home(), EpicDetail(1))
        assert nav.state == "epic_detail"

        nav.handle_action(NavigateToPreviousPage())
        assert nav.pages == (Home(),)

        nav.handle_action(NavigateToPreviousPage())
        assert nav.pages == (Home(),)
        assert nav.state == "home"

    def test_story_detail_and_back(self, nav, seeded):
        """Story detail sits on top of its epic."""
        nav.handle_action(NavigateToEpicDetail(1))
        nav.handle_action(NavigateToStoryDetail(1, 3))
        assert nav.pages == (Home(), EpicDetail(1), StoryDetail(1, 3))
        assert nav.state == "story_detail"
        assert nav.breadcrumbs() == "Home > Epic 1 > Story 3"

        nav.handle_action(NavigateToPreviousPage())
        assert nav.current_page == EpicDetail(1)
        assert nav.state == "epic_detail"

    def test_select_missing_epic(self, nav, seeded):
        """Selecting an unknown epic raises NotFound and stays put."""
        with pytest.raises(NotFound):
            nav.handle_action(NavigateToEpicDetail(99))
        assert nav.pages == (Home(),)

    def test_select_story_from_other_epic(self, nav, seeded):
        """A story of another epic cannot be opened."""
        seeded.create_story(4, "Elsewhere")  # id 5
        nav.handle_action(NavigateToEpicDetail(1))
        with pytest.raises(NotFound):
            nav.handle_action(NavigateToStoryDetail(1, 5))
        assert nav.current_page == EpicDetail(1)

    def test_story_from_home_is_invalid(self, nav, seeded):
        """Actions that do not apply to the page are rejected."""
        with pytest.raises(InvalidNavigation):
            nav.handle_action(NavigateToStoryDetail(1, 2))
        assert nav.pages == (Home(),)

    def test_quit_clears_stack(self, nav, seeded):
        """Quit from any page empties the stack."""
        nav.handle_action(NavigateToEpicDetail(1))
        nav.handle_action(Exit())
        assert nav.pages == ()
        assert nav.current_page is None
        assert nav.is_closed()

    def test_actions_after_quit_rejected(self, nav):
        """Nothing runs once the session is closed."""
        nav.handle_action(Exit())
        with pytest.raises(InvalidNavigation):
            nav.handle_action(NavigateToPreviousPage())

    def test_transitions_logged(self, nav, seeded, caplog):
        """Every transition is logged with its trigger."""
        import logging
        caplog.set_level(logging.INFO)
        nav.handle_action(NavigateToEpicDetail(1))
        assert "[NAV] home -> epic_detail (open_epic)" in caplog.text


class TestCrudActions:
    """Actions that change data."""

    def test_create_epic(self, nav, db, prompts):
        """Prompts for name and description, stays on Home."""
        prompts.get_text.side_effect = ["Launch", "v1"]
        nav.handle_action(CreateEpic())
        epic = db.read_epic(1)
        assert (epic.name, epic.description) == ("Launch", "v1")
        assert nav.pages == (Home(),)

    def test_create_epic_empty_name(self, nav, db, prompts):
        """An empty name is rejected and nothing is stored."""
        prompts.get_text.side_effect = ["", "desc"]
        with pytest.raises(ValidationError):
            nav.handle_action(CreateEpic())
        assert db.read_db().list_epics() == []

    def test_create_story(self, nav, seeded, prompts):
        """New story is appended to the current epic."""
        nav.handle_action(NavigateToEpicDetail(1))
        prompts.get_text.side_effect = ["Test", "all of it"]
        nav.handle_action(CreateStory(1))
        assert seeded.read_epic(1).story_ids == [2, 3, 5]
        assert nav.current_page == EpicDetail(1)

    def test_update_epic_status(self, nav, seeded, prompts):
        """Status comes from the prompt."""
        prompts.get_status_choice.return_value = Status.IN_PROGRESS
        nav.handle_action(UpdateEpicStatus(1))
        assert seeded.read_epic(1).status == Status.IN_PROGRESS

    def test_update_story_status(self, nav, seeded, prompts):
        """Story status comes from the prompt."""
        prompts.get_status_choice.return_value = Status.CLOSED
        nav.handle_action(UpdateStoryStatus(2))
        assert seeded.read_story(2).status == Status.CLOSED

    def test_update_status_missing_does_not_prompt(self, nav, seeded, prompts):
        """Missing IDs fail before asking for input."""
        with pytest.raises(NotFound):
            nav.handle_action(UpdateStoryStatus(99))
        prompts.get_status_choice.assert_not_called()

    def test_edit_descriptions(self, nav, seeded, prompts):
        """Descriptions are replaced with the prompted text."""
        prompts.get_text.side_effect = ["new epic text", "new story text"]
        nav.handle_action(EditEpicDescription(1))
        nav.handle_action(EditStoryDescription(2))
        assert seeded.read_epic(1).description == "new epic text"
        assert seeded.read_story(2).description == "new story text"

    def test_delete_epic_from_home(self, nav, seeded, prompts):
        """Confirmed delete cascades and stays on Home."""
        prompts.confirm.return_value = True
        nav.handle_action(DeleteEpic(1))
        with pytest.raises(NotFound):
            seeded.read_story(2)
        assert [e.id for _, e in seeded.read_db().list_epics()] == [4]
        assert nav.pages == (Home(),)

    def test_delete_epic_declined(self, nav, seeded, prompts):
        """Declining the confirmation keeps the epic."""
        prompts.confirm.return_value = False
        nav.handle_action(DeleteEpic(1))
        assert seeded.read_epic(1).name == "Launch"

    def test_delete_epic_from_its_page_pops(self, nav, seeded, prompts):
        """Deleting the displayed epic returns to Home."""
        prompts.confirm.return_value = True
        nav.handle_action(NavigateToEpicDetail(1))
        nav.handle_action(DeleteEpic(1))
        assert nav.pages == (Home(),)

    def test_delete_story_from_epic_page(self, nav, seeded, prompts):
        """Deleting a listed story stays on the epic."""
        prompts.confirm.return_value = True
        nav.handle_action(NavigateToEpicDetail(1))
        nav.handle_action(DeleteStory(1, 2))
        assert seeded.read_epic(1).story_ids == [3]
        assert nav.current_page == EpicDetail(1)

    def test_delete_story_from_its_page_pops(self, nav, seeded, prompts):
        """Deleting the displayed story returns to its epic."""
        prompts.confirm.return_value = True
        nav.handle_action(NavigateToEpicDetail(1))
        nav.handle_action(NavigateToStoryDetail(1, 3))
        nav.handle_action(DeleteStory(1, 3))
        assert nav.pages == (Home(), EpicDetail(1))

    def test_delete_missing_epic(self, nav, seeded, prompts):
        """Deleting an unknown epic fails without asking."""
        with pytest.raises(NotFound):
            nav.handle_action(DeleteEpic(99))
        prompts.confirm.assert_not_called()


class TestViews:
    """Tests for resolve_view."""

    def test_home_view(self, nav, seeded):
        """Home lists epics in creation order."""
        view = nav.resolve_view(Home())
        assert isinstance(view, HomeView)
        assert [e.id for e in view.epics] == [1, 4]

    def test_epic_view(self, nav, seeded):
        """Epic view carries the epic and its stories."""
        view = nav.resolve_view(EpicDetail(1))
        assert isinstance(view, EpicView)
        assert view.epic.name == "Launch"
        assert [s.name for s in view.stories] == ["Write docs", "Ship"]

    def test_story_view(self, nav, seeded):
        """Story view carries the story."""
        view = nav.resolve_view(StoryDetail(1, 2))
        assert isinstance(view, StoryView)
        assert view.story.name == "Write docs"


class TestSessionLoop:
    """Tests for step() and run()."""

    def test_run_until_quit(self, nav, seeded, prompts, renderer):
        """Commands are parsed per page until q."""
        prompts.get_command.side_effect = ["1", "2", "p", "p", "p", "q"]
        nav.run()

        assert nav.is_closed()
        rendered_pages = [call.args[0].page for call in renderer.render.call_args_list]
        assert rendered_pages == [
            Home(), EpicDetail(1), StoryDetail(1, 2), EpicDetail(1), Home(), Home(),
        ]

    def test_create_via_commands(self, nav, db, prompts, renderer):
        """'c' on Home creates an epic."""
        prompts.get_command.side_effect = ["c", "q"]
        prompts.get_text.side_effect = ["Launch", "v1"]
        nav.run()
        assert db.read_epic(1).name == "Launch"

    def test_unknown_input_ignored(self, nav, prompts, renderer):
        """Junk input leaves the page and reports nothing."""
        prompts.get_command.return_value = "j983f2j"
        assert nav.step() is True
        assert nav.pages == (Home(),)
        renderer.show_error.assert_not_called()

    def test_errors_reported_not_raised(self, nav, seeded, prompts, renderer):
        """A stale ID is reported to the renderer."""
        prompts.get_command.return_value = "99"
        assert nav.step() is True
        assert nav.pages == (Home(),)
        renderer.show_error.assert_called_once()
        assert "epic 99" in renderer.show_error.call_args.args[0]

    def test_stale_page_pops(self, nav, seeded, prompts, renderer):
        """If the displayed epic vanished, the navigator goes back."""
        nav.handle_action(NavigateToEpicDetail(1))
        seeded.delete_epic(1)  # e.g. another process

        assert nav.step() is True

        assert nav.pages == (Home(),)
        renderer.show_error.assert_called_once()
        prompts.get_command.assert_not_called()

    def test_storage_error_keeps_session(self, nav, db, prompts, renderer, tmp_path):
        """A corrupt file is reported and the user can still quit."""
        (tmp_path / "db.json").write_text("garbage")
        prompts.get_command.return_value = "q"

        assert nav.step() is False

        renderer.render.assert_not_called()
        assert isinstance(renderer.show_error.call_args.args[0], str)
        assert nav.is_closed()

    def test_undecodable_file_keeps_session(self, nav, prompts, renderer, tmp_path):
        """Bytes that are not UTF-8 are reported like any other corrupt file."""
        (tmp_path / "db.json").write_bytes(b"\xff\xfe garbage")
        prompts.get_command.return_value = "q"

        assert nav.step() is False

        assert "not UTF-8" in renderer.show_error.call_args.args[0]

    def test_step_after_close(self, nav, prompts):
        """step() on a closed session does nothing."""
        nav.handle_action(Exit())
        assert nav.step() is False
        prompts.get_command.assert_not_called()

    def test_parse_error_during_action(self, nav, seeded, prompts, renderer):
        """Storage failures during an action do not change the stack."""
        nav.handle_action(NavigateToEpicDetail(1))
        prompts.get_command.return_value = "c"
        prompts.get_text.side_effect = ["x", "y"]

        with patch.object(seeded, "read_epic", side_effect=ParseError(None, "boom")):
            assert nav.step() is True

        assert nav.current_page == EpicDetail(1)
        assert "boom" in renderer.show_error.call_args.args[0]
