"""Tagged representation of raw configuration values."""

import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """Closed set of shapes a raw value can take."""

    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    OPAQUE = "opaque"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.INTEGER, ValueKind.FLOAT, ValueKind.DECIMAL)


@dataclass(frozen=True)
class TaggedValue:
    """A raw value together with its kind."""

    kind: ValueKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> "TaggedValue":
        """Classify a raw value.

        Args:
            value: Raw value as stored  # (scalar, sequence or anything else)

        Returns:
            The value tagged with its kind
        """
        if isinstance(value, TaggedValue):
            return value
        return cls(classify(value), value)


def classify(value: Any) -> ValueKind:
    """Determine the kind of a raw value.

    Order matters: bool is an int subclass, and str/bytes are iterable.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, Decimal):
        return ValueKind.DECIMAL
    if isinstance(value, numbers.Integral):
        return ValueKind.INTEGER
    if isinstance(value, numbers.Real):
        return ValueKind.FLOAT
    if isinstance(value, (bytes, bytearray, Mapping)):
        return ValueKind.OPAQUE
    if isinstance(value, Iterable):
        return ValueKind.SEQUENCE
    return ValueKind.OPAQUE
