"""PropConf - Property Configuration Access Layer.

Typed, variable-aware access to key-value configuration: placeholder interpolation
with cycle detection, escape-aware list splitting and radix-aware type conversion.
"""
# ruff: noqa: F401

from .configuration import MapConfiguration
from .conversion import (
    ConversionTarget,
    LazySequence,
    SequenceOf,
    convert,
    parse_target,
    to_lazy_sequence,
)
from .exceptions import (
    ConversionError,
    CyclicReferenceError,
    MissingPropertyError,
    PropConfError,
)
from .interpolation import InterpolationEngine, interpolate
from .utils import split
from .values import TaggedValue, ValueKind

__version__ = "0.1.0"
