"""C declaration and parameter-list generators.

The declaration forms are pure formatting. The indexed generators are
recursive: each item is emitted with a leading ``,`` and the first,
empty item is dropped with ``variadics_tail`` once the walk is done.
"""

from __future__ import annotations

from stagegen.lib.lists import is_nil, match_with_state, repeat
from stagegen.lib.nat import if_, inc, nat_eq
from stagegen.lib.variadics import terms, tuple_, variadics_tail
from stagegen.registry import builtin
from stagegen.term import Term, as_text, v
from stagegen.types import Nat


def _block(body: str) -> str:
    return f"{{ {body} }}" if body else "{}"


@builtin(arity=1)
def braced(x: Term) -> Term:
    """{ x }"""
    return v(_block(as_text(x)))


@builtin(arity=2)
def typedef(ident: Term, body: Term) -> Term:
    """typedef body ident;"""
    return v(f"typedef {as_text(body)} {as_text(ident)};")


def _named(keyword: str, ident: Term, body: Term) -> Term:
    return v(f"{keyword} {as_text(ident)} {_block(as_text(body))}")


def _anonymous(keyword: str, body: Term) -> Term:
    return v(f"{keyword} {_block(as_text(body))}")


@builtin(arity=2)
def struct(ident: Term, body: Term) -> Term:
    """struct ident { body }"""
    return _named("struct", ident, body)


@builtin(arity=1)
def anon_struct(body: Term) -> Term:
    """struct { body }"""
    return _anonymous("struct", body)


@builtin(arity=2)
def union(ident: Term, body: Term) -> Term:
    """union ident { body }"""
    return _named("union", ident, body)


@builtin(arity=1)
def anon_union(body: Term) -> Term:
    """union { body }"""
    return _anonymous("union", body)


@builtin(arity=2)
def enum(ident: Term, body: Term) -> Term:
    """enum ident { body }"""
    return _named("enum", ident, body)


@builtin(arity=1)
def anon_enum(body: Term) -> Term:
    """enum { body }"""
    return _anonymous("enum", body)


@builtin(arity=1)
def indexed_params(type_list: Term) -> Term:
    """(T0 _0, ..., Tn _n), or (void) for no types"""
    return tuple_(
        if_(
            is_nil(type_list),
            v("void"),
            variadics_tail(indexed_params_aux(type_list, v(Nat(0)))),
        )
    )


@builtin(arity=2)
def indexed_params_aux(type_list: Term, i: Term) -> Term:
    return match_with_state(
        type_list, v("indexed_params_on_nil"), v("indexed_params_on_cons"), i
    )


@builtin(arity=1)
def indexed_params_on_nil(i: Term) -> Term:
    return v("")


@builtin(arity=3)
def indexed_params_on_cons(x: Term, xs: Term, i: Term) -> Term:
    return terms(v(f", {as_text(x)} _{as_text(i)}"), indexed_params_aux(xs, inc(i)))


@builtin(arity=1)
def indexed_fields(type_list: Term) -> Term:
    """T0 _0; ...; Tn _n;"""
    return indexed_fields_aux(type_list, v(Nat(0)))


@builtin(arity=2)
def indexed_fields_aux(type_list: Term, i: Term) -> Term:
    return match_with_state(
        type_list, v("indexed_fields_on_nil"), v("indexed_fields_on_cons"), i
    )


@builtin(arity=1)
def indexed_fields_on_nil(i: Term) -> Term:
    return v("")


@builtin(arity=3)
def indexed_fields_on_cons(x: Term, xs: Term, i: Term) -> Term:
    return terms(v(f"{as_text(x)} _{as_text(i)};"), indexed_fields_aux(xs, inc(i)))


@builtin(arity=1)
def indexed_initializer_list(n: Term) -> Term:
    """{ _0, ..., _{n - 1} }, or { 0 } when n is 0"""
    return braced(indexed_items(n, v("0")))


@builtin(arity=1)
def indexed_args(n: Term) -> Term:
    """_0, ..., _{n - 1}, or nothing when n is 0"""
    return indexed_items(n, v(""))


@builtin(arity=2, lazy=(1,))
def indexed_items(n: Term, empty_case: Term) -> Term:
    return if_(
        nat_eq(n, v(Nat(0))),
        empty_case,
        variadics_tail(repeat(n, v("indexed_item"))),
    )


@builtin(arity=1)
def indexed_item(i: Term) -> Term:
    return v(f", _{as_text(i)}")
