"""Row value classification and document literal rendering.

Values arriving from the database driver are classified into a closed set of
kinds, each with its own literal form:

- null: suppressed
- string: ``"text"`` (no escaping); the empty string is suppressed too
- integer, float: default textual form
- boolean: ``true`` / ``false``
- date: ``new Date("YYYY-MM-DD")`` (time of day is dropped)
- text: anything else, default textual form

A suppressed value renders as ``""`` and its field is left out of the
document.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class ValueKind(str, Enum):
    NULL = "null"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    TEXT = "text"


@dataclass(frozen=True)
class RowValue:
    """A column value tagged with its kind."""

    kind: ValueKind
    value: Any = None

    @property
    def is_empty(self) -> bool:
        """True if the value renders to nothing."""
        return self.kind is ValueKind.NULL or (
            self.kind is ValueKind.STRING and self.value == ""
        )


NULL = RowValue(ValueKind.NULL)


def classify(raw: Any) -> RowValue:
    """Tag a raw driver value with its ``ValueKind``.

    ``bool`` is checked before ``int`` and ``datetime`` is a ``date``.
    Values of any other type are converted to text eagerly, so a value that
    cannot be represented fails here rather than while rendering.

    Examples:
        >>> classify(None).kind
        <ValueKind.NULL: 'null'>
        >>> classify(True).kind
        <ValueKind.BOOLEAN: 'boolean'>
        >>> classify(b"ab").kind
        <ValueKind.TEXT: 'text'>
    """
    if raw is None:
        return NULL
    if isinstance(raw, RowValue):
        return raw
    if isinstance(raw, bool):
        return RowValue(ValueKind.BOOLEAN, raw)
    if isinstance(raw, int):
        return RowValue(ValueKind.INTEGER, raw)
    if isinstance(raw, (float, Decimal)):
        return RowValue(ValueKind.FLOAT, raw)
    if isinstance(raw, str):
        return RowValue(ValueKind.STRING, raw)
    if isinstance(raw, (date, datetime)):
        return RowValue(ValueKind.DATE, raw)
    return RowValue(ValueKind.TEXT, str(raw))


def render_literal(value: RowValue) -> str:
    """Render a value as a document literal, or ``""`` if suppressed.

    Examples:
        >>> render_literal(classify("SP"))
        '"SP"'
        >>> render_literal(classify(""))
        ''
        >>> render_literal(classify(date(2016, 5, 1)))
        'new Date("2016-05-01")'
    """
    kind = value.kind
    if kind is ValueKind.NULL:
        return ""
    if kind is ValueKind.STRING:
        if value.value == "":
            return ""
        return f'"{value.value}"'
    if kind is ValueKind.BOOLEAN:
        return "true" if value.value else "false"
    if kind is ValueKind.DATE:
        return f'new Date("{value.value.strftime("%Y-%m-%d")}")'
    return str(value.value)
