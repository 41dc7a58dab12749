"""
WebInk SQL value codec.

Converts native scalars to SQL literal text and back. Statements issued by
the ORM bind their values as parameters; ``encode`` renders those values
for statement logging and for callers composing raw ``WHERE`` filters.
``decode`` restores numbers from untyped text columns.
"""

from __future__ import annotations

import datetime
import decimal
import re
from typing import Any, Optional, Sequence

__all__ = ["encode", "decode", "render_sql", "format_date"]

_INT_RE = re.compile(r"^\d+$")
_FLOAT_RE = re.compile(r"^\d+\.\d+$")


def encode(value: Any) -> str:
    """
    Render a value as an SQL literal.

    ``None`` becomes the ``NULL`` keyword, numbers stay unquoted, strings are
    single-quoted with embedded quotes doubled, and anything else is
    stringified and quoted.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float, decimal.Decimal)):
        return str(value)
    text = value if isinstance(value, str) else str(value)
    return "'" + text.replace("'", "''") + "'"


def decode(value: Any) -> Any:
    """
    Best-effort conversion of a result value.

    Only strings are inspected: ``NULL`` becomes ``None``, digit runs become
    ``int`` and ``digits.digits`` become ``float``. Values the driver already
    typed are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    if value == "NULL":
        return None
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value


def render_sql(sql: str, params: Optional[Sequence[Any]] = None) -> str:
    """Substitute ``?`` placeholders with encoded literals (for logs only)."""
    if not params:
        return sql
    values = iter(params)
    return re.sub(r"\?", lambda _: encode(next(values, None)), sql)


def format_date(value: Any) -> str:
    """Format a datetime the way SQL DATETIME columns expect it."""
    if isinstance(value, datetime.datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return ""
