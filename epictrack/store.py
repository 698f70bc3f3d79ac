"""
In-memory store of epics and stories.

The Store owns referential integrity: every story belongs to exactly one
epic, and deleting an epic deletes its stories. Persistence is handled by
epictrack.db, which builds a Store from the file for each call.
"""

import logging

from epictrack.errors import NotFound, ParseError, ValidationError
from epictrack.models import Epic, Status, Story

logger = logging.getLogger(__name__)


class IdAllocator:
    """Hands out strictly increasing IDs shared by epics and stories."""

    def __init__(self, last_id: int = 0):
        self._last_id = last_id

    @property
    def last_id(self) -> int:
        return self._last_id

    def next_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def observe(self, entity_id: int) -> None:
        """Ensure future IDs are greater than entity_id."""
        if entity_id > self._last_id:
            self._last_id = entity_id


def _require_name(name: str) -> None:
    if not name or not name.strip():
        raise ValidationError("name", "must not be empty")


class Store:
    """Mapping of IDs to epics and stories with CRUD operations."""

    def __init__(self):
        self.epics: dict[int, Epic] = {}
        self.stories: dict[int, Story] = {}
        self.allocator = IdAllocator()

    def add_epic(self, name: str, description: str = "") -> int:
        _require_name(name)
        epic_id = self.allocator.next_id()
        self.epics[epic_id] = Epic(id=epic_id, name=name, description=description)
        return epic_id

    def add_story(self, epic_id: int, name: str, description: str = "") -> int:
        epic = self.get_epic(epic_id)
        _require_name(name)
        story_id = self.allocator.next_id()
        self.stories[story_id] = Story(id=story_id, name=name, description=description)
        epic.story_ids.append(story_id)
        return story_id

    def get_epic(self, epic_id: int) -> Epic:
        epic = self.epics.get(epic_id)
        if epic is None:
            raise NotFound("epic", epic_id)
        return epic

    def get_story(self, story_id: int) -> Story:
        story = self.stories.get(story_id)
        if story is None:
            raise NotFound("story", story_id)
        return story

    def owner_of(self, story_id: int) -> int:
        """Return the ID of the epic that owns story_id."""
        self.get_story(story_id)
        for epic_id, epic in self.epics.items():
            if story_id in epic.story_ids:
                return epic_id
        # Unreachable while the integrity invariant holds
        raise NotFound("story", story_id, "no owning epic")

    def update_epic_status(self, epic_id: int, status: Status) -> None:
        self.get_epic(epic_id).status = status

    def update_story_status(self, story_id: int, status: Status) -> None:
        self.get_story(story_id).status = status

    def update_epic_description(self, epic_id: int, description: str) -> None:
        self.get_epic(epic_id).description = description

    def update_story_description(self, story_id: int, description: str) -> None:
        self.get_story(story_id).description = description

    def delete_epic(self, epic_id: int) -> None:
        """Delete an epic and every story it owns."""
        epic = self.get_epic(epic_id)
        for story_id in epic.story_ids:
            self.stories.pop(story_id, None)
        del self.epics[epic_id]
        logger.debug(f"Deleted epic {epic_id} with {len(epic.story_ids)} stories")

    def delete_story(self, story_id: int, epic_id: int | None = None) -> None:
        """Delete a story and unlink it from its epic.

        If epic_id is given, the story must belong to that epic.
        """
        owner_id = self.owner_of(story_id)
        if epic_id is not None and owner_id != epic_id:
            self.get_epic(epic_id)
            raise NotFound("story", story_id, f"not in epic {epic_id}")
        self.epics[owner_id].story_ids.remove(story_id)
        del self.stories[story_id]

    def list_epics(self) -> list[tuple[int, Epic]]:
        return list(self.epics.items())

    def list_stories(self, epic_id: int) -> list[tuple[int, Story]]:
        epic = self.get_epic(epic_id)
        return [(story_id, self.stories[story_id]) for story_id in epic.story_ids]

    def to_dict(self) -> dict:
        """Serialize to the on-disk layout."""
        return {
            "last_item_id": self.allocator.last_id,
            "epics": {
                str(epic_id): {
                    "name": epic.name,
                    "description": epic.description,
                    "status": epic.status.value,
                    "stories": list(epic.story_ids),
                }
                for epic_id, epic in self.epics.items()
            },
            "stories": {
                str(story_id): {
                    "name": story.name,
                    "description": story.description,
                    "status": story.status.value,
                }
                for story_id, story in self.stories.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Store":
        """Build a Store from the on-disk layout.

        The data is expected to match db.schema.json already. Referential
        integrity is checked here.

        Raises:
            ParseError: If an epic references a missing story, a story is
                owned by zero or several epics, or an epic and a story share
                an ID.
        """
        store = cls()

        for key, raw in data.get("stories", {}).items():
            story_id = int(key)
            store.stories[story_id] = Story(
                id=story_id,
                name=raw["name"],
                description=raw.get("description", ""),
                status=Status(raw["status"]),
            )
            store.allocator.observe(story_id)

        owners: dict[int, int] = {}
        for key, raw in data.get("epics", {}).items():
            epic_id = int(key)
            story_ids = [int(s) for s in raw.get("stories", [])]
            for story_id in story_ids:
                if story_id not in store.stories:
                    raise ParseError(None, f"epic {epic_id} references missing story {story_id}")
                if story_id in owners:
                    raise ParseError(
                        None,
                        f"story {story_id} belongs to epics {owners[story_id]} and {epic_id}",
                    )
                owners[story_id] = epic_id
            store.epics[epic_id] = Epic(
                id=epic_id,
                name=raw["name"],
                description=raw.get("description", ""),
                status=Status(raw["status"]),
                story_ids=story_ids,
            )
            store.allocator.observe(epic_id)

        orphans = sorted(set(store.stories) - set(owners))
        if orphans:
            raise ParseError(None, f"stories without an epic: {orphans}")

        shared = sorted(set(store.epics) & set(store.stories))
        if shared:
            raise ParseError(None, f"IDs used by both an epic and a story: {shared}")

        # The stored counter is a floor only; observed IDs always win
        store.allocator.observe(int(data.get("last_item_id", 0)))
        return store
