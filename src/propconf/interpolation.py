"""Variable interpolation engine for PropConf values."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .exceptions import CyclicReferenceError

logger = logging.getLogger(__name__)

PREFIX = "${"
SUFFIX = "}"

LOOKUP_TYPE = Callable[[str], Optional[Any]]


@dataclass
class _Frame:
    """One string being expanded."""

    name: Optional[str]  # (variable whose value this is, None for the top-level string)
    text: str
    pos: int = 0
    parts: List[str] = field(default_factory=list)


class InterpolationEngine:
    """Engine expanding ``${name}`` placeholders against a lookup function."""

    def __init__(self, lookup: LOOKUP_TYPE):
        """Initialize interpolation engine.

        Args:
            lookup: Maps a variable name to its raw value  # (None when the name is unknown)

        Note:
            The engine keeps no state between calls; the names being expanded live on a
            stack local to each call.
        """
        self.lookup = lookup

    def interpolate(self, value: Any) -> Any:
        """Resolve all placeholders in a value.

        Args:
            value: Value to interpolate  # (only strings are touched)

        Returns:
            Interpolated string, or the value itself if it is not a string

        Raises:
            CyclicReferenceError: If a variable transitively references itself
        """
        if not isinstance(value, str):
            return value
        return self._resolve_value(value)

    def _resolve_value(self, value: str) -> str:
        """Expand the placeholders of a string, nested values included.

        Nesting is tracked on an explicit stack of frames, so the depth of a reference
        chain is not limited by the interpreter's recursion limit.

        Args:
            value: String that may contain ${...} markers

        Returns:
            String with every known variable substituted

        Raises:
            CyclicReferenceError: If a name is expanded while already on the stack
        """
        # Fast path: nothing to do, return the very same string
        if PREFIX not in value:
            return value

        stack = [_Frame(None, value)]  # List[_Frame] (outermost first)
        resolving = []  # List[str] (names of the nested frames, in stack order)

        while True:
            frame = stack[-1]
            start = frame.text.find(PREFIX, frame.pos)
            end = frame.text.find(SUFFIX, start + len(PREFIX)) if start >= 0 else -1

            if start < 0 or end < 0:
                # No further complete marker, the rest is literal text
                frame.parts.append(frame.text[frame.pos :])
                result = "".join(frame.parts)
                stack.pop()
                if not stack:
                    return result
                resolving.pop()
                stack[-1].parts.append(result)
                continue

            frame.parts.append(frame.text[frame.pos : start])
            frame.pos = end + len(SUFFIX)
            name = frame.text[start + len(PREFIX) : end]

            if name in resolving:
                cycle = resolving[resolving.index(name) :] + [name]
                raise CyclicReferenceError(cycle)

            raw_value = self.lookup(name)
            if raw_value is None:
                logger.debug("Leaving unresolved variable %s in place", frame.text[start : end + len(SUFFIX)])
                frame.parts.append(frame.text[start : end + len(SUFFIX)])
                continue

            # Siblings see the stack as it was once this frame is popped again
            stack.append(_Frame(name, str(raw_value)))
            resolving.append(name)


def interpolate(value: Any, lookup: LOOKUP_TYPE) -> Any:
    """Resolve ``${name}`` placeholders in a value.

    Args:
        value: Value to interpolate  # (non-strings are returned as they are)
        lookup: Maps a variable name to its raw value or None

    Returns:
        Interpolated value

    Raises:
        CyclicReferenceError: If a variable transitively references itself
    """
    return InterpolationEngine(lookup).interpolate(value)
