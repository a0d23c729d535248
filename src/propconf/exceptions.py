"""Custom exceptions for PropConf."""

from typing import Any, Optional


class PropConfError(Exception):
    """Base exception for PropConf errors."""

    pass


class CyclicReferenceError(PropConfError):
    """Raised when a variable transitively references itself during interpolation."""

    def __init__(self, cycle_path: list[str]):
        self.cycle_path = cycle_path
        cycle_display = " → ".join(cycle_path)
        super().__init__(f"Cyclic variable reference detected: {cycle_display}")


class ConversionError(PropConfError):
    """Raised when a value cannot be converted to the requested target."""

    def __init__(self, value: Any, target: Any, reason: Optional[str] = None):
        """Initialize conversion error.

        Args:
            value: The value that failed to convert
            target: The requested conversion target
            reason: Optional detail appended to the message
        """
        self.value = value
        self.target = target
        self.reason = reason

        target_name = getattr(target, "label", None) or repr(target)
        message = f"Cannot convert {value!r} to {target_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingPropertyError(PropConfError, KeyError):
    """Raised when a typed getter finds no value and no default was given."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key '{key}' does not map to an existing object")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]
