import typing as ty

if ty.TYPE_CHECKING:
    from .core import StackNode
    from .keys import Consumer


class MissingContext(LookupError):
    """Raised by get_or_fail when a key has no live binding and no default."""

    def __init__(self, consumer: "Consumer", stack: ty.Optional["StackNode"] = None):
        self.consumer = consumer
        self.stack = stack
        self.help = consumer.help
        msg = f"Cannot find context {consumer.name}"
        if self.help:
            msg += "\n" + self.help
        super().__init__(msg)


class InvalidSubclass(TypeError):
    """A Stack subclass must know how to rebuild itself around a new node."""

    def __init__(self, stack_type: type):
        self.stack_type = stack_type
        super().__init__(
            f"Cannot instantiate Stack subclass {stack_type.__name__};"
            " you need to override instantiate()"
        )
