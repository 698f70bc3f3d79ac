"""
Data models for epics and stories.
"""

from dataclasses import dataclass, field
from enum import Enum


class Status(Enum):
    """Lifecycle stage of an epic or story.

    Values are the on-disk spelling. Any status may move to any other.
    """

    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"

    @property
    def label(self) -> str:
        """Display label, e.g. 'IN PROGRESS'."""
        return STATUS_LABELS[self]


STATUS_LABELS = {
    Status.OPEN: "OPEN",
    Status.IN_PROGRESS: "IN PROGRESS",
    Status.RESOLVED: "RESOLVED",
    Status.CLOSED: "CLOSED",
}

# Menu numbers used by the status prompt
STATUS_CHOICES = {
    "1": Status.OPEN,
    "2": Status.IN_PROGRESS,
    "3": Status.RESOLVED,
    "4": Status.CLOSED,
}


def parse_status(value: str | None) -> Status | None:
    """Parse a serialized status string.

    Returns None if the value is unknown.
    """
    if value is None:
        return None
    for status in Status:
        if status.value == value:
            return status
    return None


@dataclass
class Epic:
    """Top-level work item owning zero or more stories."""
    id: int
    name: str
    description: str = ""
    status: Status = Status.OPEN
    story_ids: list[int] = field(default_factory=list)  # creation order


@dataclass
class Story:
    """Work item nested under exactly one epic.

    The owning epic is found through Epic.story_ids, not stored here.
    """
    id: int
    name: str
    description: str = ""
    status: Status = Status.OPEN
