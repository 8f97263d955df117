"""Human-facing views of a stack.

debug() is for programs that want to correlate keys across snapshots
without holding on to the keys themselves; inspect() is for people.
"""

import itertools
import threading
import typing as ty
import weakref

from thds import humenc
from thds.core import config, log

from . import core
from .keys import NOT_SERIALIZABLE, RESET, Consumer, truncate

logger = log.getLogger(__name__)

INLINE_WIDTH = config.item("thds.keystack.inspect.inline_width", 60, parse=int)

_DISPLAY_IDS: "weakref.WeakKeyDictionary[Consumer, str]" = weakref.WeakKeyDictionary()
_DISPLAY_IDS_LOCK = threading.Lock()
_COUNTER = itertools.count()


class DebugEntry(ty.NamedTuple):
    ctx_id: str
    name: str
    value: ty.Any


def _next_display_id() -> str:
    n = next(_COUNTER)
    return humenc.encode(n.to_bytes(max(3, (n.bit_length() + 7) // 8), "big"))


def display_id(consumer: Consumer) -> str:
    """Stable for the lifetime of the key, and never shared with another key."""
    ctx_id = _DISPLAY_IDS.get(consumer)
    if ctx_id is not None:
        return ctx_id
    with _DISPLAY_IDS_LOCK:
        ctx_id = _DISPLAY_IDS.get(consumer)
        if ctx_id is None:
            ctx_id = _DISPLAY_IDS[consumer] = _next_display_id()
    return ctx_id


def debug(top: core.Chain) -> ty.List[DebugEntry]:
    """Top to root."""
    return [
        DebugEntry(display_id(binding.consumer), binding.name, binding.value)
        for _, binding in core.extract(top)
    ]


def _format(consumer: Consumer, value: ty.Any) -> str:
    if value is RESET:
        return "RESET"
    try:
        return truncate(consumer.formatter(value))
    except Exception:
        logger.debug("Unable to format value", key=consumer.name, exc_info=True)
        return NOT_SERIALIZABLE


def inspect(top: core.Chain) -> str:
    """Every binding, oldest first, as `name: value`.

    Fits on one line when it is short enough, otherwise one binding per line.
    """
    details = [f"{b.name}: {_format(b.consumer, b.value)}" for _, b in core.extract(top)]
    details.reverse()
    inline = ", ".join(details)
    if len(inline) < INLINE_WIDTH():
        return inline
    return "\n".join(details)


def indent(text: str, prefix: str = "  ") -> str:
    """Indent each line except the first one."""
    return ("\n" + prefix).join(text.split("\n"))


def block(title: str, top: core.Chain) -> str:
    details = inspect(top)
    if not details:
        return f"{title} {{}}"
    return "\n".join([f"{title} {{", "  " + indent(details), "}"])
