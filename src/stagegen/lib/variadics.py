from __future__ import annotations

from stagegen.errors import TermTypeError, VariadicsRangeError
from stagegen.registry import builtin
from stagegen.term import Term, as_nat, as_text, as_variadics, v
from stagegen.types import Nat, Variadics


@builtin(arity=1)
def variadics(xs: Term) -> Term:
    """Split a comma-separated fragment into a variadic group."""
    return v(as_variadics(xs))


@builtin(arity=1)
def variadics_count(xs: Term) -> Term:
    return v(Nat(len(as_variadics(xs))))


@builtin(arity=2)
def variadics_get(i: Term, xs: Term) -> Term:
    index = as_nat(i).value
    group = as_variadics(xs)
    if index >= len(group):
        raise VariadicsRangeError(f"variadics_get({index}) on {len(group)} items")
    return v(group.items[index])


@builtin(arity=1)
def variadics_tail(xs: Term) -> Term:
    """Everything but the first item."""
    group = as_variadics(xs)
    if not group.items:
        raise VariadicsRangeError("variadics_tail of an empty group")
    return v(Variadics(items=group.items[1:]))


@builtin(arity=2)
def variadics_drop(n: Term, xs: Term) -> Term:
    count = as_nat(n).value
    group = as_variadics(xs)
    if count > len(group):
        raise VariadicsRangeError(f"cannot drop {count} of {len(group)} items")
    return v(Variadics(items=group.items[count:]))


@builtin(arity=1, name="tuple")
def tuple_(xs: Term) -> Term:
    return v(f"({as_text(xs)})")


@builtin(arity=1)
def untuple(x: Term) -> Term:
    text = as_text(x).strip()
    if not (text.startswith("(") and text.endswith(")")):
        raise TermTypeError(f"not a tuple: {text!r}")
    return v(as_variadics(v(text[1:-1])))


@builtin(arity=2)
def terms(a: Term, b: Term) -> Term:
    """Juxtapose two fragments, skipping empty ones."""
    parts = [part for part in (as_text(a), as_text(b)) if part]
    return v(" ".join(parts))


@builtin(arity=2)
def cat(a: Term, b: Term) -> Term:
    """Concatenate two fragments with nothing in between."""
    return v(as_text(a) + as_text(b))


@builtin(arity=0)
def empty() -> Term:
    return v("")
