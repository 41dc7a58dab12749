"""
Name conversion between model classes and database tables.

    table_name_for("AppleTree")  -> "apple_tree"
    class_name_for("apple_tree") -> "AppleTree"
"""

from __future__ import annotations

import re

__all__ = ["table_name_for", "class_name_for", "sorts_first"]

_CAMEL_PART_RE = re.compile(r"[A-Z][a-z0-9]*")
_SNAKE_PART_RE = re.compile(r"(?:^|_)([a-z0-9]+)")


def table_name_for(class_name: str) -> str:
    """Split a CamelCase name on capitals, lowercase and join with ``_``."""
    parts = _CAMEL_PART_RE.findall(class_name)
    if not parts:
        return class_name.lower()
    return "_".join(p.lower() for p in parts)


def class_name_for(table_name: str) -> str:
    """Inverse of ``table_name_for`` for snake_case input."""
    if table_name[:1].isupper():
        return table_name
    return "".join(p[0].upper() + p[1:] for p in _SNAKE_PART_RE.findall(table_name))


def sorts_first(table_a: str, table_b: str) -> bool:
    """
    Tie-break used for one_one FK placement and join-table naming.

    Plain lexicographic comparison of table names, so both sides of a
    relationship derive the same physical layout independently.
    """
    return table_a < table_b
