import typing as ty

from . import core, debug
from .debug import DebugEntry
from .errors import InvalidSubclass
from .keys import Binding, Consumer

T = ty.TypeVar("T")
S = ty.TypeVar("S", bound="Stack")
R = ty.TypeVar("R")


class Stack:
    """An immutable stack of keyed values. Every write returns a new Stack.

    Subclasses must override `instantiate` so that writes hand back an
    instance of the subclass, e.g.:

    ```
    class RequestStack(Stack):
        def __init__(self, request_id: str, node: core.Chain = core.EMPTY):
            super().__init__(node)
            self.request_id = request_id

        def instantiate(self, node: core.Chain) -> "RequestStack":
            return RequestStack(self.request_id, node)
    ```
    """

    __slots__ = ("_node",)

    def __init__(self, node: core.Chain = core.EMPTY):
        self._node = node

    @property
    def node(self) -> core.Chain:
        return self._node

    def has(self, consumer: Consumer) -> bool:
        return core.has(self._node, consumer)

    def get(self, consumer: Consumer[T]) -> ty.Union[T, core.AbsentType]:
        return core.get(self._node, consumer)

    def get_all(self, consumer: Consumer[T]) -> ty.Iterator[T]:
        return core.get_all(self._node, consumer)

    def get_or_fail(self, consumer: Consumer[T]) -> T:
        return core.get_or_fail(self._node, consumer)

    def debug(self) -> ty.List[DebugEntry]:
        return debug.debug(self._node)

    def inspect(self) -> str:
        return debug.inspect(self._node)

    def instantiate(self: S, node: core.Chain) -> S:
        """Build a new instance of this class around the given node."""
        self._check_instantiate()
        return ty.cast(S, Stack(node))

    def _check_instantiate(self) -> None:
        cls = type(self)
        # inheriting a parent's instantiate would hand back the parent's type
        if cls is not Stack and "instantiate" not in vars(cls):
            raise InvalidSubclass(cls)

    def _rebuild(self: S, node: core.Chain) -> S:
        if node is self._node:
            return self
        return self.instantiate(node)

    def with_(self: S, *bindings: Binding) -> S:
        self._check_instantiate()
        return self._rebuild(core.with_(self._node, *bindings))

    def merge(self: S, other: "Stack") -> S:
        self._check_instantiate()
        if other is self:
            return self
        return self._rebuild(core.merge(self._node, other._node))

    def dedupe(self: S) -> S:
        self._check_instantiate()
        return self._rebuild(core.dedupe(self._node))

    def map(self: S, fn: ty.Callable[[S], R]) -> R:
        return fn(self)

    def __str__(self) -> str:
        return f"{type(self).__name__} {{ ... }}"

    def __repr__(self) -> str:
        return debug.block(type(self).__name__, self._node)
