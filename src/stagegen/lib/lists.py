"""Finite lists built from ``nil`` and ``cons``.

Recursive operations over a list go through ``match`` or
``match_with_state``: the list is taken apart once per call and the tail
is handed to the next step. Handlers are named operations; any running
state (an index, an accumulator) travels as an explicit argument.
"""

from __future__ import annotations

from stagegen.errors import EmptyListError
from stagegen.lib.nat import dec, if_eq_zero, inc
from stagegen.lib.variadics import terms
from stagegen.registry import builtin
from stagegen.term import Term, as_list, as_text, as_variadics, call, v
from stagegen.types import Cons, Nat, Nil, list_from_items, list_length


@builtin(arity=0)
def nil() -> Term:
    return v(Nil())


@builtin(arity=2)
def cons(x: Term, xs: Term) -> Term:
    return v(Cons(head=x, tail=as_list(xs)))


@builtin(arity=1, name="list")
def list_(items: Term) -> Term:
    """Build a list of fragments from a comma-separated group."""
    return v(list_from_items(v(item) for item in as_variadics(items).items))


@builtin(arity=1)
def is_nil(xs: Term) -> Term:
    return v(isinstance(as_list(xs), Nil))


@builtin(arity=1)
def head(xs: Term) -> Term:
    lst = as_list(xs)
    if isinstance(lst, Nil):
        raise EmptyListError("head of an empty list")
    return lst.head


@builtin(arity=1)
def tail(xs: Term) -> Term:
    lst = as_list(xs)
    if isinstance(lst, Nil):
        raise EmptyListError("tail of an empty list")
    return v(lst.tail)


@builtin(arity=1)
def list_len(xs: Term) -> Term:
    return v(Nat(list_length(as_list(xs))))


@builtin(arity=3)
def match(xs: Term, on_nil: Term, on_cons: Term) -> Term:
    """Continue with ``on_nil()`` or ``on_cons(head, tail)``."""
    lst = as_list(xs)
    if isinstance(lst, Nil):
        return call(as_text(on_nil))
    return call(as_text(on_cons), lst.head, v(lst.tail))


@builtin(arity=4)
def match_with_state(xs: Term, on_nil: Term, on_cons: Term, state: Term) -> Term:
    """Continue with ``on_nil(state)`` or ``on_cons(head, tail, state)``."""
    lst = as_list(xs)
    if isinstance(lst, Nil):
        return call(as_text(on_nil), state)
    return call(as_text(on_cons), lst.head, v(lst.tail), state)


@builtin(arity=2)
def list_map(f: Term, xs: Term) -> Term:
    return match_with_state(xs, v("list_map_on_nil"), v("list_map_on_cons"), f)


@builtin(arity=1)
def list_map_on_nil(f: Term) -> Term:
    return v(Nil())


@builtin(arity=3)
def list_map_on_cons(x: Term, xs: Term, f: Term) -> Term:
    return cons(call(as_text(f), x), list_map(f, xs))


@builtin(arity=2)
def repeat(n: Term, f: Term) -> Term:
    """Juxtapose ``f(0) f(1) ... f(n - 1)``."""
    return repeat_progress(v(Nat(0)), n, f)


@builtin(arity=3)
def repeat_progress(i: Term, remaining: Term, f: Term) -> Term:
    return if_eq_zero(
        remaining,
        v(""),
        terms(call(as_text(f), i), repeat_progress(inc(i), dec(remaining), f)),
    )
