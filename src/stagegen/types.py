from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from stagegen.errors import NatRangeError

if TYPE_CHECKING:
    from stagegen.term import Term

# Counters are small by construction; recursion driven by a Nat never
# goes deeper than this.
NAT_MAX = 255


@dataclass(frozen=True)
class Nat:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise NatRangeError(f"nat must be an int, got {self.value!r}")
        if self.value < 0 or self.value > NAT_MAX:
            raise NatRangeError(f"nat {self.value} outside 0..{NAT_MAX}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Nil:
    def __iter__(self) -> Iterator[Term]:
        return iter(())


@dataclass(frozen=True)
class Cons:
    head: Term
    tail: List

    def __iter__(self) -> Iterator[Term]:
        node: List = self
        while isinstance(node, Cons):
            yield node.head
            node = node.tail


List = Union[Nil, Cons]


def list_from_items(items: Iterable[Term]) -> List:
    result: List = Nil()
    for item in reversed(list(items)):
        result = Cons(head=item, tail=result)
    return result


def list_items(lst: List) -> list[Term]:
    return list(iter(lst))


def list_length(lst: List) -> int:
    return sum(1 for _ in lst)


@dataclass(frozen=True)
class Variadics:
    items: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return ", ".join(self.items)


_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


def split_variadics(text: str) -> Variadics:
    """Split ``text`` at top-level commas.

    Commas nested inside ``()``, ``[]`` or ``{}`` stay in their item, so
    ``"int (*)(int, char), long"`` yields two items. Each item is
    stripped. Blank text is the empty group.
    """
    if not text.strip():
        return Variadics()
    items: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(depth - 1, 0)
        if char == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    items.append("".join(current).strip())
    return Variadics(items=tuple(items))
