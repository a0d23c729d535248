"""Utility functions for PropConf."""

from typing import Any, Dict, List, Optional

import yaml

DEFAULT_LIST_DELIMITER = ","
ESCAPE = "\\"


def split(text: Optional[str], delimiter: str = DEFAULT_LIST_DELIMITER) -> List[str]:
    """Split a delimited string into trimmed tokens.

    A backslash right before the delimiter escapes it: the backslash is dropped and the
    delimiter is kept as data. A backslash anywhere else is kept as it is.

    Args:
        text: String to split  # (None or "" gives an empty list)
        delimiter: Single delimiter character

    Returns:
        Ordered list of tokens  # (empty tokens are kept)
    """
    if not text:
        return []

    tokens = []  # List[str] (completed tokens)
    chars = []  # List[str] (characters of the current token)
    # Bounds of escaped delimiters in the current token, which trimming must not cross
    protected_start = None
    protected_end = 0

    i = 0
    while i < len(text):
        c = text[i]
        if c == ESCAPE and i + 1 < len(text) and text[i + 1] == delimiter:
            if protected_start is None:
                protected_start = len(chars)
            chars.append(delimiter)
            protected_end = len(chars)
            i += 2
            continue

        if c == delimiter:
            tokens.append(_trim_token(chars, protected_start, protected_end))
            chars = []
            protected_start = None
            protected_end = 0
        else:
            chars.append(c)
        i += 1

    tokens.append(_trim_token(chars, protected_start, protected_end))
    return tokens


def _trim_token(chars: List[str], protected_start: Optional[int], protected_end: int) -> str:
    """Strip surrounding whitespace without eating into an escaped delimiter.

    Args:
        chars: Characters of the token
        protected_start: Index of the first escaped delimiter, or None
        protected_end: Index just past the last escaped delimiter

    Returns:
        Trimmed token
    """
    token = "".join(chars)
    if protected_start is None:
        return token.strip()

    head = token[:protected_start].lstrip()
    tail = token[protected_end:].rstrip()
    return head + token[protected_start:protected_end] + tail


def load_yaml(stream: Any) -> Any:
    """Load YAML content from a stream.

    Args:
        stream: Stream to read YAML from  # (file-like object or string)
    Returns:
        Parsed YAML content  # (usually a nested dict)
    """
    return yaml.safe_load(stream)


def flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten a nested mapping into dot-separated keys.

    Args:
        data: Nested mapping  # (e.g. {"db": {"port": 5432}})
        prefix: Current key prefix  # (dot-separated path prefix)

    Returns:
        Flat mapping  # (e.g. {"db.port": 5432})
    """
    result = {}  # Dict[str, Any] (flattened configuration)

    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            # Recursively flatten nested mappings
            result.update(flatten(value, full_key))
        else:
            result[full_key] = value
    return result
