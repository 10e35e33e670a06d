from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from stagegen.errors import ArityError, RegistryError, UnknownOperationError
from stagegen.term import Invocation, Term

Impl = Callable[..., Term]


@dataclass(frozen=True)
class Operation:
    """A named rewrite rule with a fixed arity.

    Calling an operation builds an :class:`Invocation` and rejects a wrong
    argument count immediately; the engine checks again on dispatch for
    invocations built by name.
    """

    name: str
    arity: int
    impl: Impl = field(compare=False)
    lazy: frozenset[int] = frozenset()
    doc: str = ""

    def __post_init__(self) -> None:
        if self.arity < 0:
            raise RegistryError(f"operation {self.name} has negative arity")
        for position in self.lazy:
            if not 0 <= position < self.arity:
                raise RegistryError(
                    f"operation {self.name} marks position {position} lazy "
                    f"but takes {self.arity} args"
                )

    def __call__(self, *args: Term) -> Invocation:
        if len(args) != self.arity:
            raise ArityError(self.name, self.arity, len(args))
        return Invocation(op=self.name, args=tuple(args))

    def apply(self, args: tuple[Term, ...]) -> Term:
        if len(args) != self.arity:
            raise ArityError(self.name, self.arity, len(args))
        return self.impl(*args)


class OperationRegistry:
    def __init__(self, parent: OperationRegistry | None = None) -> None:
        self._ops: dict[str, Operation] = {}
        self._parent = parent

    def register(self, op: Operation) -> Operation:
        existing = self.lookup(op.name)
        if existing is not None and existing is not op:
            raise RegistryError(f"operation {op.name} already defined")
        self._ops[op.name] = op
        return op

    def lookup(self, name: str) -> Operation | None:
        op = self._ops.get(name)
        if op is None and self._parent is not None:
            return self._parent.lookup(name)
        return op

    def get(self, name: str) -> Operation:
        op = self.lookup(name)
        if op is None:
            raise UnknownOperationError(name)
        return op

    def arity(self, name: str) -> int:
        return self.get(name).arity

    def child(self) -> OperationRegistry:
        return OperationRegistry(parent=self)

    def names(self) -> list[str]:
        names = set(self._ops)
        if self._parent is not None:
            names.update(self._parent.names())
        return sorted(names)

    def __iter__(self) -> Iterator[Operation]:
        for name in self.names():
            yield self.get(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None


BUILTINS = OperationRegistry()


def builtin(
    arity: int,
    *,
    name: str | None = None,
    lazy: tuple[int, ...] = (),
    registry: OperationRegistry = BUILTINS,
) -> Callable[[Impl], Operation]:
    def decorator(impl: Impl) -> Operation:
        op_name = name or impl.__name__
        doc = (impl.__doc__ or "").strip().splitlines()
        op = Operation(
            name=op_name,
            arity=arity,
            impl=impl,
            lazy=frozenset(lazy),
            doc=doc[0] if doc else "",
        )
        return registry.register(op)

    return decorator


def load_builtins() -> OperationRegistry:
    """Import every library module so its operations are registered."""
    from stagegen import chaining  # noqa: F401
    from stagegen.lib import gen, lists, nat, variadics  # noqa: F401

    return BUILTINS
