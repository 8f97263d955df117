"""The persistent stack itself.

A stack is either EMPTY (None) or a StackNode, which holds exactly one Binding
and a reference to its parent stack. Nodes are never mutated, so any number of
stacks may share a common tail. Every function here is pure: writes return a
new top node (or the very same one, if nothing would change), and reads walk
from the top toward the root.

Callers that care about allocation may rely on the identity short-circuits:
`with_(s) is s`, `merge(s, EMPTY) is s`, `merge(EMPTY, s) is s`,
`merge(s, s) is s`, and `dedupe(s) is s` whenever s holds no duplicate keys.
"""

import typing as ty
from dataclasses import dataclass
from functools import reduce

from thds.core import log

from .errors import MissingContext
from .keys import RESET, Binding, Consumer, _Sentinel

T = ty.TypeVar("T")
logger = log.getLogger(__name__)


class AbsentType(_Sentinel):
    pass


ABSENT = AbsentType("Absent")
# what get() returns for a key with no live binding and no default.


@dataclass(frozen=True, eq=False, repr=False)
class StackNode:
    """Compared and hashed by identity only."""

    binding: Binding
    parent: ty.Optional["StackNode"]

    def __repr__(self) -> str:
        from .debug import block

        return block("StackNode", self)


Chain = ty.Optional[StackNode]  # a stack reference; None is the empty stack
EMPTY: Chain = None


def extract(top: Chain) -> ty.Iterator[ty.Tuple[StackNode, Binding]]:
    """Every node with its binding, from the top down to the root."""
    node = top
    while node is not None:
        yield node, node.binding
        node = node.parent


def _find(top: Chain, consumer: Consumer) -> ty.Tuple[bool, ty.Any]:
    for _, binding in extract(top):
        if binding.consumer is consumer:
            if binding.value is RESET:
                return False, None
            return True, binding.value
    return False, None


def has(top: Chain, consumer: Consumer) -> bool:
    """False if the nearest binding for this key is a RESET."""
    return _find(top, consumer)[0]


def get(top: Chain, consumer: Consumer[T]) -> ty.Union[T, AbsentType]:
    found, value = _find(top, consumer)
    if found:
        return value
    if consumer.has_default:
        return ty.cast(T, consumer.default)
    return ABSENT


def get_or_fail(top: Chain, consumer: Consumer[T]) -> T:
    found, value = _find(top, consumer)
    if found:
        return value
    if consumer.has_default:
        return ty.cast(T, consumer.default)
    raise MissingContext(consumer, top)


def get_all(top: Chain, consumer: Consumer[T]) -> ty.Iterator[T]:
    """All values bound to this key, most recent first.

    A RESET ends the history - nothing older than it is ever yielded.
    """
    for _, binding in extract(top):
        if binding.consumer is consumer:
            if binding.value is RESET:
                return
            yield binding.value


def _push(parent: Chain, binding: Binding) -> Chain:
    return StackNode(binding, parent)


def with_(top: Chain, *bindings: Binding) -> Chain:
    """The last binding ends up on top."""
    if not bindings:
        return top
    return reduce(_push, bindings, top)


def merge(left: Chain, right: Chain) -> Chain:
    """As if every binding of `right` were pushed, oldest first, onto `left`.

    On any key present in both, `right` wins.
    """
    if left is None:
        return right
    if right is None or left is right:
        return left
    return with_(left, *reversed([binding for _, binding in extract(right)]))


def dedupe(top: Chain) -> Chain:
    """Keep only the nearest binding of each key, in their original order.

    The tail below the deepest duplicate is shared with the original stack;
    everything above it is rebuilt without the shadowed bindings. RESET
    bindings above that tail are dropped as well, since whatever they hid is
    gone.
    """
    seen: ty.Set[Consumer] = set()
    rebuild: ty.List[Binding] = list()  # top-down; everything kept above `base`
    pending: ty.List[Binding] = list()  # top-down; kept since the last duplicate
    base = top
    above_base = 0
    for depth, (node, binding) in enumerate(extract(top), 1):
        if binding.consumer in seen:
            # sharing has to break below this node
            base = node.parent
            above_base = depth
            rebuild.extend(pending)
            pending = list()
            continue
        seen.add(binding.consumer)
        if binding.value is not RESET:
            pending.append(binding)

    if base is top:
        return top

    # whatever is still pending lives on in `base`.
    logger.debug("Rebuilt deduplicated stack", kept=len(rebuild), dropped=above_base - len(rebuild))
    return with_(base, *reversed(rebuild))
