"""Type conversion of raw configuration values."""

import math
import re
import struct
from collections import abc
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Union

from .exceptions import ConversionError
from .utils import DEFAULT_LIST_DELIMITER, split
from .values import TaggedValue, ValueKind


class ConversionTarget(Enum):
    """Scalar kinds a raw value can be converted to."""

    BYTE = "8-bit integer"
    SHORT = "16-bit integer"
    INTEGER = "32-bit integer"
    LONG = "64-bit integer"
    BIG_INTEGER = "arbitrary-precision integer"
    FLOAT = "32-bit float"
    DOUBLE = "64-bit float"
    BIG_DECIMAL = "arbitrary-precision decimal"
    BOOLEAN = "boolean"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class SequenceOf:
    """Sequence target; ``element=None`` keeps the decomposed elements as they are."""

    element: Optional[Union[ConversionTarget, "SequenceOf"]] = None

    @property
    def label(self) -> str:
        if self.element is None:
            return "sequence"
        return f"sequence of {self.element.label}"


TARGET_TYPE = Union[ConversionTarget, SequenceOf]

# Bit width of the bounded integer targets
_INTEGER_BITS = {
    ConversionTarget.BYTE: 8,
    ConversionTarget.SHORT: 16,
    ConversionTarget.INTEGER: 32,
    ConversionTarget.LONG: 64,
}

_DIGIT_PATTERNS = {
    16: re.compile(r"[0-9a-fA-F]+"),
    10: re.compile(r"[0-9]+"),
    8: re.compile(r"[0-7]+"),
}
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_FLOATS = {"NaN": math.nan, "Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}

_TRUE_STRINGS = {"true", "yes", "on", "y", "t"}
_FALSE_STRINGS = {"false", "no", "off", "n", "f"}

_TARGET_NAMES = {
    "byte": ConversionTarget.BYTE,
    "short": ConversionTarget.SHORT,
    "int": ConversionTarget.INTEGER,
    "integer": ConversionTarget.INTEGER,
    "long": ConversionTarget.LONG,
    "biginteger": ConversionTarget.BIG_INTEGER,
    "big_integer": ConversionTarget.BIG_INTEGER,
    "float": ConversionTarget.FLOAT,
    "double": ConversionTarget.DOUBLE,
    "bigdecimal": ConversionTarget.BIG_DECIMAL,
    "big_decimal": ConversionTarget.BIG_DECIMAL,
    "decimal": ConversionTarget.BIG_DECIMAL,
    "bool": ConversionTarget.BOOLEAN,
    "boolean": ConversionTarget.BOOLEAN,
}
_SEQUENCE_NAME_PATTERN = re.compile(r"(?:list|sequence)(?:\[(?P<element>.+)\])?")


def _split_radix(text: str) -> Tuple[str, str, int]:
    """Separate sign, radix prefix and digits of a trimmed number string.

    Returns:
        (sign, digits, radix)  # (e.g. ("-", "1f", 16) for "-0x1f")
    """
    sign = ""
    body = text
    if body and body[0] in "+-":
        sign, body = body[0], body[1:]

    if body[:2] in ("0x", "0X"):
        return sign, body[2:], 16
    if body.startswith("#"):
        return sign, body[1:], 16
    if len(body) > 1 and body[0] == "0" and _DIGIT_PATTERNS[10].fullmatch(body[1:]):
        return sign, body[1:], 8
    return sign, body, 10


def _parse_integer(text: str, target: ConversionTarget) -> int:
    """Parse integer text honouring hex and octal prefixes.

    Raises:
        ConversionError: If the digits do not match the radix
    """
    sign, digits, radix = _split_radix(text)
    if not _DIGIT_PATTERNS[radix].fullmatch(digits):
        raise ConversionError(text, target, f"not a valid base-{radix} number")
    number = int(digits, radix)
    return -number if sign == "-" else number


def _check_integer_range(number: int, original: Any, target: ConversionTarget) -> int:
    bits = _INTEGER_BITS.get(target)
    if bits is not None:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if not low <= number <= high:
            raise ConversionError(original, target, f"out of range [{low}, {high}]")
    return number


def _to_integer(tagged: TaggedValue, target: ConversionTarget) -> Any:
    if tagged.kind.is_numeric:
        return tagged.value
    if tagged.kind is not ValueKind.TEXT:
        raise ConversionError(tagged.value, target, f"{tagged.kind.value} value is not a number")

    number = _parse_integer(tagged.value.strip(), target)
    return _check_integer_range(number, tagged.value, target)


def _to_float(tagged: TaggedValue, target: ConversionTarget) -> Any:
    if tagged.kind.is_numeric:
        return tagged.value
    if tagged.kind is not ValueKind.TEXT:
        raise ConversionError(tagged.value, target, f"{tagged.kind.value} value is not a number")

    text = tagged.value.strip()
    if text in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[text]

    _, _, radix = _split_radix(text)
    try:
        if radix != 10:
            number = float(_parse_integer(text, target))
        elif _DECIMAL_PATTERN.fullmatch(text):
            number = float(text)
        else:
            raise ConversionError(tagged.value, target, "not a valid decimal number")
    except OverflowError as e:
        raise ConversionError(tagged.value, target, "out of range") from e

    if math.isinf(number):
        raise ConversionError(tagged.value, target, "out of range")
    if target is ConversionTarget.FLOAT:
        try:
            # Round to single precision
            number = struct.unpack("f", struct.pack("f", number))[0]
        except OverflowError as e:
            raise ConversionError(tagged.value, target, "out of range") from e
    return number


def _to_decimal(tagged: TaggedValue, target: ConversionTarget) -> Any:
    if tagged.kind.is_numeric:
        return tagged.value
    if tagged.kind is not ValueKind.TEXT:
        raise ConversionError(tagged.value, target, f"{tagged.kind.value} value is not a number")

    text = tagged.value.strip()
    _, _, radix = _split_radix(text)
    if radix != 10:
        return Decimal(_parse_integer(text, target))
    if not _DECIMAL_PATTERN.fullmatch(text):
        raise ConversionError(tagged.value, target, "not a valid decimal number")
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ConversionError(tagged.value, target, "not a valid decimal number") from e


def _to_boolean(tagged: TaggedValue, target: ConversionTarget) -> bool:
    if tagged.kind is ValueKind.BOOLEAN:
        return tagged.value
    if tagged.kind is ValueKind.TEXT:
        text = tagged.value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ConversionError(tagged.value, target, "not a boolean")


_CONVERTERS: Dict[ConversionTarget, Callable[[TaggedValue, ConversionTarget], Any]] = {
    ConversionTarget.BYTE: _to_integer,
    ConversionTarget.SHORT: _to_integer,
    ConversionTarget.INTEGER: _to_integer,
    ConversionTarget.LONG: _to_integer,
    ConversionTarget.BIG_INTEGER: _to_integer,
    ConversionTarget.FLOAT: _to_float,
    ConversionTarget.DOUBLE: _to_float,
    ConversionTarget.BIG_DECIMAL: _to_decimal,
    ConversionTarget.BOOLEAN: _to_boolean,
}


def iter_elements(value: Any, delimiter: str = DEFAULT_LIST_DELIMITER, flat: bool = True) -> Iterator[Any]:
    """Decompose a value into its elements, lazily.

    Strings are split at the delimiter, sequences are walked, any other value is a
    single element.

    Args:
        value: Raw value to decompose
        delimiter: Delimiter for string values
        flat: Flatten nested sequences and split strings inside them  # (False walks one level only)

    Yields:
        Elements in order
    """
    tagged = TaggedValue.of(value)
    if tagged.kind is ValueKind.TEXT:
        yield from split(tagged.value, delimiter)
    elif tagged.kind is ValueKind.SEQUENCE:
        for item in tagged.value:
            if flat:
                yield from iter_elements(item, delimiter)
            else:
                yield item
    else:
        yield tagged.value


def _sequence_elements(value: Any, target: SequenceOf, delimiter: str) -> Iterator[Any]:
    """Elements of value for a sequence target; nested targets keep the nesting."""
    return iter_elements(value, delimiter, flat=not isinstance(target.element, SequenceOf))


def convert(value: Any, target: TARGET_TYPE, delimiter: str = DEFAULT_LIST_DELIMITER) -> Any:
    """Convert a raw value to the requested target.

    Values that already are numbers are returned unchanged for numeric targets.

    Args:
        value: Raw value  # (already interpolated)
        target: A ConversionTarget member or a SequenceOf
        delimiter: Delimiter used when a string has to become a sequence

    Returns:
        The converted value  # (list for sequence targets)

    Raises:
        ConversionError: If the value cannot be converted or the target is unsupported
    """
    if isinstance(target, SequenceOf):
        elements = _sequence_elements(value, target, delimiter)
        if target.element is None:
            return list(elements)
        return [convert(item, target.element, delimiter) for item in elements]

    if not isinstance(target, ConversionTarget):
        raise ConversionError(value, target, f"unsupported conversion target {target!r}")

    return _CONVERTERS[target](TaggedValue.of(value), target)


class LazySequence:
    """Restartable, on-demand view of the elements of a value."""

    def __init__(
        self,
        value: Any,
        delimiter: str = DEFAULT_LIST_DELIMITER,
        element: Optional[TARGET_TYPE] = None,
    ):
        """Initialize lazy sequence.

        Args:
            value: Raw value to decompose  # (one-shot iterators are read into a tuple)
            delimiter: Delimiter for string values
            element: Optional target every element is converted to
        """
        if isinstance(value, abc.Iterator):
            value = tuple(value)
        self.value = value
        self.delimiter = delimiter
        self.element = element

    def __iter__(self) -> Iterator[Any]:
        # A fresh generator per iteration makes the sequence restartable
        for item in _sequence_elements(self.value, SequenceOf(self.element), self.delimiter):
            if self.element is None:
                yield item
            else:
                yield convert(item, self.element, self.delimiter)

    def __repr__(self) -> str:
        """String representation."""
        return f"LazySequence({self.value!r}, delimiter={self.delimiter!r})"


def to_lazy_sequence(
    value: Any, delimiter: str = DEFAULT_LIST_DELIMITER, element: Optional[TARGET_TYPE] = None
) -> LazySequence:
    """Create a lazy, restartable sequence over the elements of a value."""
    return LazySequence(value, delimiter, element)


def parse_target(name: str) -> TARGET_TYPE:
    """Look up a conversion target by name.

    Args:
        name: Kind name, case-insensitive  # (e.g. "int", "double", "list[long]")

    Returns:
        The matching target

    Raises:
        ConversionError: If the name is not a known kind
    """
    key = name.strip().lower()
    if key in _TARGET_NAMES:
        return _TARGET_NAMES[key]

    match = _SEQUENCE_NAME_PATTERN.fullmatch(key)
    if match:
        element = match.group("element")
        return SequenceOf(parse_target(element) if element else None)

    raise ConversionError(name, name, "unknown conversion target")
