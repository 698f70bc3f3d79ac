"""
Pages of the interactive session and the views resolved for them.

Pages hold only the IDs needed to query the database. Views hold the data
read for one render and are never kept between renders.
"""

from dataclasses import dataclass, field

from epictrack.models import Epic, Story


@dataclass(frozen=True)
class Home:
    """Lists all epics."""
    kind = "home"

    def label(self) -> str:
        return "Home"


@dataclass(frozen=True)
class EpicDetail:
    """One epic and its stories."""
    epic_id: int
    kind = "epic_detail"

    def label(self) -> str:
        return f"Epic {self.epic_id}"


@dataclass(frozen=True)
class StoryDetail:
    """One story."""
    epic_id: int
    story_id: int
    kind = "story_detail"

    def label(self) -> str:
        return f"Story {self.story_id}"


Page = Home | EpicDetail | StoryDetail


@dataclass
class HomeView:
    page: Home
    epics: list[Epic] = field(default_factory=list)


@dataclass
class EpicView:
    page: EpicDetail
    epic: Epic
    stories: list[Story] = field(default_factory=list)


@dataclass
class StoryView:
    page: StoryDetail
    story: Story


View = HomeView | EpicView | StoryView
