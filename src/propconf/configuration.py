"""PropConf map-backed configuration module."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .conversion import TARGET_TYPE, ConversionTarget, SequenceOf, convert, iter_elements
from .exceptions import MissingPropertyError
from .interpolation import InterpolationEngine
from .utils import DEFAULT_LIST_DELIMITER, flatten, load_yaml

logger = logging.getLogger(__name__)

# Distinguishes "no default given" from a default of None
_NO_DEFAULT = object()


class MapConfiguration:
    """Flat key-value configuration with interpolated, typed access.

    Keys are plain strings, hierarchy is expressed with dots ("db.port").
    A key holding several values is stored as a list.
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        list_delimiter: str = DEFAULT_LIST_DELIMITER,
        delimiter_parsing_disabled: bool = False,
    ):
        """Initialize configuration.

        Args:
            data: Initial properties  # (each value goes through add_property)
            list_delimiter: Character splitting string values into lists
            delimiter_parsing_disabled: Store string values as they are
        """
        self.list_delimiter = list_delimiter
        self.delimiter_parsing_disabled = delimiter_parsing_disabled
        self._store: Dict[str, Any] = {}
        self._engine = InterpolationEngine(self.lookup)

        for key, value in (data or {}).items():
            self.add_property(key, value)

    @classmethod
    def from_yaml(cls, stream: Any, **kwargs: Any) -> MapConfiguration:
        """Build a configuration from a YAML mapping.

        Args:
            stream: YAML text or an open stream  # (nested mappings become dotted keys)
            **kwargs: Passed on to the constructor

        Returns:
            New configuration
        """
        data = load_yaml(stream) or {}
        if not isinstance(data, dict):
            raise TypeError(f"YAML document must be a mapping, got {type(data).__name__}")
        return cls(flatten(data), **kwargs)

    # ---- raw access -------------------------------------------------------

    def add_property(self, key: str, value: Any) -> None:
        """Add a value to a key, turning the key list-valued if it already has one.

        Args:
            key: Property key
            value: Value to add  # (strings are split at the list delimiter)
        """
        values = self._split_values(value)
        if not values:
            return

        if key in self._store:
            current = self._store[key]
            existing = current if isinstance(current, list) else [current]
            self._store[key] = existing + values
        else:
            self._store[key] = values[0] if len(values) == 1 else values
        logger.debug("Added %r to property '%s'", value, key)

    def set_property(self, key: str, value: Any) -> None:
        """Replace the value of a key."""
        self._store.pop(key, None)
        self.add_property(key, value)

    def clear_property(self, key: str) -> None:
        """Remove a key; unknown keys are ignored."""
        if self._store.pop(key, None) is not None:
            logger.debug("Cleared property '%s'", key)

    def clear(self) -> None:
        """Remove all keys."""
        self._store.clear()

    def get_property(self, key: str) -> Any:
        """Return the raw stored value, or None if the key is unknown."""
        return self._store.get(key)

    def contains_key(self, key: str) -> bool:
        return key in self._store

    def is_empty(self) -> bool:
        return not self._store

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """Return keys in insertion order.

        Args:
            prefix: Only keys equal to prefix or below "prefix."

        Returns:
            Matching keys
        """
        if prefix is None:
            return list(self._store)
        return [key for key in self._store if key == prefix or key.startswith(f"{prefix}.")]

    def subset(self, prefix: str) -> MapConfiguration:
        """Return a new configuration with the keys below prefix, prefix stripped.

        Args:
            prefix: Key prefix without the trailing dot  # ("" copies the whole configuration)

        Returns:
            New configuration sharing the delimiter settings
        """
        result = MapConfiguration(
            list_delimiter=self.list_delimiter,
            delimiter_parsing_disabled=self.delimiter_parsing_disabled,
        )
        # Copy stored values as they are, they were split on the way in
        if not prefix:
            result._store = self.to_dict()
            return result

        for key in self.keys(prefix):
            if key == prefix:
                continue
            value = self._store[key]
            result._store[key[len(prefix) + 1 :]] = list(value) if isinstance(value, list) else value
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Flat copy of the stored data."""
        return {key: list(value) if isinstance(value, list) else value for key, value in self._store.items()}

    # ---- interpolation ----------------------------------------------------

    def lookup(self, name: str) -> Any:
        """Variable lookup used for interpolation.

        Args:
            name: Property key

        Returns:
            The raw value, its first element for list values, or None
        """
        return self._first_value(self._store.get(name))

    def interpolate(self, value: Any) -> Any:
        """Resolve ${...} placeholders in value against this configuration."""
        return self._engine.interpolate(value)

    # ---- typed access -----------------------------------------------------

    def get(self, key: str, target: TARGET_TYPE, default: Any = _NO_DEFAULT) -> Any:
        """Get a property converted to target.

        Args:
            key: Property key
            target: Conversion target
            default: Returned when the key is unknown  # (raises MissingPropertyError if omitted)

        Returns:
            Interpolated and converted value

        Raises:
            MissingPropertyError: If the key is unknown and no default is given
            ConversionError: If the value cannot be converted
            CyclicReferenceError: If interpolation runs into a cycle
        """
        raw_value = self._store.get(key)
        if raw_value is None:
            return self._default(key, default)

        if isinstance(target, SequenceOf):
            # Stored values are already split; convert element-wise so escaped delimiters stay intact
            stored = raw_value if isinstance(raw_value, list) else [raw_value]
            elements = [self.interpolate(item) for item in stored]
            if target.element is None:
                return elements
            return [convert(item, target.element, self.list_delimiter) for item in elements]

        value = self.interpolate(self._first_value(raw_value))
        if value is None:
            return self._default(key, default)
        return convert(value, target, self.list_delimiter)

    def get_string(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        """Get the interpolated string value of a key."""
        raw_value = self._first_value(self._store.get(key))
        if raw_value is None:
            return self._default(key, default)
        return str(self.interpolate(raw_value))

    def get_boolean(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.BOOLEAN, default)

    def get_byte(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.BYTE, default)

    def get_short(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.SHORT, default)

    def get_int(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.INTEGER, default)

    def get_long(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.LONG, default)

    def get_big_integer(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.BIG_INTEGER, default)

    def get_float(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.FLOAT, default)

    def get_double(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.DOUBLE, default)

    def get_big_decimal(self, key: str, default: Any = _NO_DEFAULT) -> Any:
        return self.get(key, ConversionTarget.BIG_DECIMAL, default)

    def get_list(
        self, key: str, default: Any = _NO_DEFAULT, element: Optional[TARGET_TYPE] = None
    ) -> Any:
        """Get all values of a key as a list.

        Args:
            key: Property key
            default: Returned when the key is unknown  # (an empty list if omitted)
            element: Optional target every element is converted to

        Returns:
            List of interpolated (and possibly converted) values
        """
        if default is _NO_DEFAULT:
            default = []
        return self.get(key, SequenceOf(element), default)

    def get_string_array(self, key: str) -> List[str]:
        """Get all values of a key as strings; unknown keys give an empty list."""
        return [str(item) for item in self.get_list(key)]

    # ---- dict-style access -----------------------------------------------

    def __getitem__(self, key: str) -> Any:
        """Dict-style getter returning the raw value."""
        if key not in self._store:
            raise MissingPropertyError(key)
        return self._store[key]

    def __setitem__(self, key: str, value: Any) -> None:
        """Dict-style setter, same as set_property."""
        self.set_property(key, value)

    def __delitem__(self, key: str) -> None:
        if key not in self._store:
            raise MissingPropertyError(key)
        self.clear_property(key)

    def __contains__(self, key: str) -> bool:
        return self.contains_key(key)

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        """String representation."""
        return f"MapConfiguration({self._store})"

    # ---- helpers ----------------------------------------------------------

    def _split_values(self, value: Any) -> List[Any]:
        """Break a value to be added into its individual values."""
        if value is None:
            return []
        if isinstance(value, str) and (self.delimiter_parsing_disabled or not value):
            return [value]
        return list(iter_elements(value, self.list_delimiter))

    @staticmethod
    def _first_value(value: Any) -> Any:
        if isinstance(value, list):
            return value[0] if value else None
        return value

    @staticmethod
    def _default(key: str, default: Any) -> Any:
        if default is _NO_DEFAULT:
            raise MissingPropertyError(key)
        return default
