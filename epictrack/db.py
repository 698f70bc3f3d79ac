"""
Database facade over the JSON file.

Every call loads the whole file into a fresh Store, applies the operation
in memory and, for mutating calls, writes the result back before returning.
A multi-step mutation such as a cascade delete therefore completes in
memory before any byte is written.

There is no locking. If another process writes the file between two
calls, the next load sees the newest state and the last writer wins.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from epictrack.errors import ParseError, StorageError
from epictrack.lib.validate import SchemaError, validate, validate_before_write
from epictrack.models import Epic, Status, Story
from epictrack.store import Store

logger = logging.getLogger(__name__)

SCHEMA_NAME = "db"


class JSONFileDatabase:
    """Reads and writes the whole Store as one JSON document."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)

    def read_db(self) -> Store:
        """Load the Store from disk. A missing file is an empty Store.

        Raises:
            StorageError: If the file exists but cannot be read
            ParseError: If the contents are not valid database JSON
        """
        if not self.file_path.exists():
            logger.debug(f"[DB] {self.file_path} not found, starting empty")
            return Store()

        try:
            content = self.file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(self.file_path, f"not UTF-8 text: {e}") from None
        except OSError as e:
            raise StorageError(self.file_path, str(e)) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(self.file_path, f"invalid JSON: {e}") from None

        try:
            validate(data, SCHEMA_NAME)
        except SchemaError as e:
            raise ParseError(self.file_path, str(e)) from None

        try:
            return Store.from_dict(data)
        except ParseError as e:
            raise ParseError(self.file_path, e.message) from None

    def write_db(self, store: Store) -> None:
        """Write the Store to disk atomically.

        Raises:
            StorageError: If the file cannot be written, or the Store would
                serialize to a document the schema rejects
        """
        data = store.to_dict()
        try:
            validate_before_write(data, SCHEMA_NAME, self.file_path)
        except SchemaError as e:
            raise StorageError(self.file_path, str(e)) from None

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.file_path.parent, prefix=f".{self.file_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self.file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(self.file_path, str(e)) from e


class TrackerDatabase:
    """Sole entry point for reading and changing tracker data."""

    def __init__(self, database: JSONFileDatabase | Path | str):
        if not isinstance(database, JSONFileDatabase):
            database = JSONFileDatabase(Path(database))
        self.database = database

    @contextmanager
    def _transaction(self) -> Iterator[Store]:
        """Load, yield for mutation, then save.

        Nothing is written if the body raises.
        """
        store = self.database.read_db()
        yield store
        self.database.write_db(store)

    def read_db(self) -> Store:
        return self.database.read_db()

    def read_epic(self, epic_id: int) -> Epic:
        return self.database.read_db().get_epic(epic_id)

    def read_story(self, story_id: int) -> Story:
        return self.database.read_db().get_story(story_id)

    def read_epic_stories(self, epic_id: int) -> tuple[Epic, list[Story]]:
        """Return an epic and its stories from a single load."""
        store = self.database.read_db()
        epic = store.get_epic(epic_id)
        return epic, [story for _, story in store.list_stories(epic_id)]

    def create_epic(self, name: str, description: str = "") -> int:
        with self._transaction() as store:
            epic_id = store.add_epic(name, description)
        logger.info(f"[DB] Created epic {epic_id}: {name}")
        return epic_id

    def create_story(self, epic_id: int, name: str, description: str = "") -> int:
        with self._transaction() as store:
            story_id = store.add_story(epic_id, name, description)
        logger.info(f"[DB] Created story {story_id} in epic {epic_id}: {name}")
        return story_id

    def delete_epic(self, epic_id: int) -> None:
        with self._transaction() as store:
            store.delete_epic(epic_id)
        logger.info(f"[DB] Deleted epic {epic_id}")

    def delete_story(self, story_id: int, epic_id: int | None = None) -> None:
        with self._transaction() as store:
            store.delete_story(story_id, epic_id)
        logger.info(f"[DB] Deleted story {story_id}")

    def update_epic_status(self, epic_id: int, status: Status) -> None:
        with self._transaction() as store:
            store.update_epic_status(epic_id, status)
        logger.info(f"[DB] Epic {epic_id} status -> {status.value}")

    def update_story_status(self, story_id: int, status: Status) -> None:
        with self._transaction() as store:
            store.update_story_status(story_id, status)
        logger.info(f"[DB] Story {story_id} status -> {status.value}")

    def update_epic_description(self, epic_id: int, description: str) -> None:
        with self._transaction() as store:
            store.update_epic_description(epic_id, description)
        logger.info(f"[DB] Epic {epic_id} description updated")

    def update_story_description(self, story_id: int, description: str) -> None:
        with self._transaction() as store:
            store.update_story_description(story_id, description)
        logger.info(f"[DB] Story {story_id} description updated")
