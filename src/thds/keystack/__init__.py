"""Immutable, structurally-shared stacks of keyed context values."""

from thds.core import meta

from . import core, debug, errors, keys  # noqa: F401
from .core import ABSENT, EMPTY, AbsentType, StackNode  # noqa: F401
from .errors import InvalidSubclass, MissingContext  # noqa: F401
from .keys import (  # noqa: F401
    RESET,
    Binding,
    Consumer,
    Key,
    create_empty_key,
    create_key,
    create_key_with_default,
)
from .stack import Stack  # noqa: F401

__version__ = meta.get_version(__name__)
