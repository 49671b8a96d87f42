"""Identifier helpers shared by records and jobs."""

import re

_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile(r"[^a-z0-9-]")


def slugify(text: str) -> str:
    """Lower-case, hyphenate whitespace runs and drop anything else."""
    lowered = text.strip().lower()
    return _INVALID.sub("", _WHITESPACE.sub("-", lowered))
