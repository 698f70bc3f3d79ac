"""
Schema checks for the database document.

Documents are checked against schemas/<name>.schema.json when the file is
read and again before it is written. Callers in epictrack.db translate
SchemaError into ParseError or StorageError.
"""

import json
from pathlib import Path

import jsonschema
from jsonschema.exceptions import best_match
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"


class SchemaError(Exception):
    """Document does not match its schema."""

    def __init__(self, schema_name: str, message: str, path: str = None, error_count: int = 1):
        self.schema_name = schema_name
        self.path = path
        self.error_count = error_count
        detail = f" at {path}" if path else ""
        more = f" (+{error_count - 1} more)" if error_count > 1 else ""
        super().__init__(f"[{schema_name}] {message}{detail}{more}")


# Compiled validators by schema name
_validators: dict[str, Validator] = {}


def get_validator(schema_name: str) -> Validator:
    """Compile and cache the validator for a schema.

    The validator class follows the schema's $schema keyword.

    Raises:
        SchemaError: If the schema file is missing or not a valid schema
    """
    if schema_name in _validators:
        return _validators[schema_name]

    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise SchemaError(schema_name, f"Schema file not found: {schema_path}")

    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    cls = validator_for(schema)
    try:
        cls.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise SchemaError(schema_name, f"Bad schema: {e.message}") from None

    _validators[schema_name] = cls(schema)
    return _validators[schema_name]


def validate(data: dict, schema_name: str) -> None:
    """
    Check a decoded document against a named schema.

    Only the most relevant error is reported; the count of the rest is
    appended to the message.

    Raises:
        SchemaError: If the document does not match
    """
    errors = list(get_validator(schema_name).iter_errors(data))
    if not errors:
        return

    error = best_match(errors)
    path = ".".join(str(p) for p in error.absolute_path) or "(root)"
    raise SchemaError(schema_name, error.message, path, error_count=len(errors))


def validate_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    """Refuse to write a document that would not load back.

    Raises:
        SchemaError: If data doesn't match schema
    """
    try:
        validate(data, schema_name)
    except SchemaError as e:
        raise SchemaError(
            schema_name,
            f"Refusing to write invalid data to {filepath}: {e}",
            e.path,
        ) from None
