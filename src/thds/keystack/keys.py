"""Keys are the identities under which values are bound on a stack.

Each key is split into a Consumer (the read capability, which carries the
name, default and formatter) and a Provider (a factory for Bindings). You may
expose only one half of a key to a given audience, e.g. let a library read a
value that only your application is allowed to provide:

```
Ctx = keys.create_key_with_default("Ctx", "fallback")

stack = Stack().with_(Ctx.provider("hello"))
assert stack.get(Ctx.consumer) == "hello"
```

Consumers are matched by identity, never by name, so two keys created with
the same name are still two different keys.
"""

import json
import typing as ty
from dataclasses import dataclass, field

from thds.core import config

T = ty.TypeVar("T")

VALUE_WIDTH = config.item("thds.keystack.inspect.value_width", 60, parse=int)
NOT_SERIALIZABLE = "[NOT SERIALIZABLE]"
VOID = "[VOID]"

Formatter = ty.Callable[[T], str]
# should return a single line that represents the value


class _Sentinel:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False


RESET: ty.Any = _Sentinel("RESET")
# Bind a key to RESET to hide every earlier binding of that key.


def truncate(text: str, width: int = 0) -> str:
    width = width or VALUE_WIDTH()
    return text if len(text) <= width else text[: width - 3] + "..."


def format_value(value: ty.Any) -> str:
    if value is None or isinstance(value, (bool, int, float)):
        return repr(value)
    if isinstance(value, str):
        return truncate(f'"{value}"')
    try:
        return truncate(json.dumps(value))
    except (TypeError, ValueError):
        # unserializable types, or circular references
        return NOT_SERIALIZABLE


def format_void(value: ty.Any) -> str:
    return VOID


class Consumer(ty.Generic[T]):
    """The read half of a key. Never compare these by anything but identity."""

    __slots__ = ("name", "has_default", "default", "formatter", "help", "__weakref__")

    def __init__(
        self,
        name: str,
        has_default: bool,
        default: ty.Optional[T],
        formatter: Formatter[T],
        help: ty.Optional[str] = None,
    ):
        self.name = name
        self.has_default = has_default
        self.default = default
        self.formatter = formatter
        self.help = help

    def __repr__(self) -> str:
        return f"Consumer({self.name!r})"


@dataclass(frozen=True)
class Binding(ty.Generic[T]):
    consumer: Consumer[T]
    value: T

    @property
    def name(self) -> str:
        return self.consumer.name

    @property
    def is_reset(self) -> bool:
        return self.value is RESET


@dataclass(frozen=True)
class Key(ty.Generic[T]):
    consumer: Consumer[T]
    provider: ty.Callable[..., Binding[T]] = field(repr=False)
    reset: Binding[T] = field(repr=False)

    @property
    def name(self) -> str:
        return self.consumer.name


def _make_key(consumer: Consumer[T], void: bool = False) -> Key[T]:
    if void:

        def provide_void() -> Binding[T]:
            return Binding(consumer, ty.cast(T, None))

        return Key(consumer, provide_void, Binding(consumer, RESET))

    def provide(value: T) -> Binding[T]:
        return Binding(consumer, value)

    return Key(consumer, provide, Binding(consumer, RESET))


def create_key(
    name: str, formatter: Formatter[T] = format_value, *, help: ty.Optional[str] = None
) -> Key[T]:
    """A key with no default - get() on a stack without it returns ABSENT."""
    return _make_key(Consumer(name, False, None, formatter, help))


def create_key_with_default(
    name: str,
    default: T,
    formatter: Formatter[T] = format_value,
    *,
    help: ty.Optional[str] = None,
) -> Key[T]:
    return _make_key(Consumer(name, True, default, formatter, help))


def create_empty_key(name: str, *, help: ty.Optional[str] = None) -> Key[None]:
    """A key that carries no value - only its presence matters.

    Its provider takes no argument.
    """
    return _make_key(Consumer(name, False, None, format_void, help), void=True)
