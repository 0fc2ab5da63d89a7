"""History key validation helpers."""

import re

SLUG_RE = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


def validate_history_key(value: str) -> str:
    """Validate the key a history is stored under.

    Parameters
    ----------
    value: str
        Candidate key, e.g. a session or document identifier.

    Returns
    -------
    str
        The original value if it is a valid slug.

    Raises
    ------
    TypeError
        If ``value`` is not a string.
    ValueError
        If ``value`` contains invalid characters or length, or is a
        relative path component.
    """
    if not isinstance(value, str):
        raise TypeError("history key must be a string")
    if not SLUG_RE.fullmatch(value) or value in {".", ".."}:
        raise ValueError("Invalid history key. Use 1-128 chars from [A-Za-z0-9_.-].")
    return value
