"""
Safe .env file parser for epictrack.env.

Parses KEY=value lines without shell execution. Values are taken
literally, so $VARS and backticks are rejected rather than expanded.
"""

import re
from pathlib import Path

# Values that look like shell expansion are refused
FORBIDDEN_PATTERNS = [
    r'`',
    r'\$\(',
    r'\$\{',
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_env(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parse KEY=value text into a dict.

    Blank lines and lines starting with '#' are skipped. An optional
    leading 'export ' is accepted.

    Raises:
        ValueError: if a line is malformed or holds a forbidden pattern
    """
    result = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        key, sep, value = line.partition('=')
        if not sep:
            raise ValueError(f"{source}:{lineno}: Invalid syntax (no '=')")

        key = key.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"{source}:{lineno}: Invalid key '{key}'")

        value = _unquote(value.strip())
        if any(re.search(p, value) for p in FORBIDDEN_PATTERNS):
            raise ValueError(f"{source}:{lineno}: Forbidden pattern in value for {key}")

        result[key] = value
    return result


def load_env(filepath: Path) -> dict[str, str]:
    """
    Parse an env file, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env(path.read_text(), source=str(path))
