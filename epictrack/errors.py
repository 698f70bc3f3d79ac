"""Error types shared by the store, database and navigator."""

from pathlib import Path


class TrackerError(Exception):
    """Base class for every error the navigator reports to the user."""


class ValidationError(TrackerError):
    """User-supplied data was rejected (e.g. empty name)."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class NotFound(TrackerError):
    """An epic or story ID does not exist."""

    def __init__(self, kind: str, entity_id: int, detail: str = ""):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(
            f"Could not find {kind} {entity_id} in the database"
            + (f" ({detail})" if detail else "")
        )


class StorageError(TrackerError):
    """The database file could not be read or written."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Storage error for {path}: {message}")


class ParseError(TrackerError):
    """The database file does not hold valid serialized state."""

    def __init__(self, path: Path | None, message: str):
        self.path = path
        self.message = message
        super().__init__(
            f"Invalid database{f' {path}' if path else ''}: {message}"
        )
