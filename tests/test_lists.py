from __future__ import annotations

import pytest

from stagegen.engine import Engine, render
from stagegen.errors import EmptyListError
from stagegen.lib.lists import (
    cons,
    head,
    is_nil,
    list_,
    list_len,
    list_map,
    match,
    match_with_state,
    nil,
    repeat,
    tail,
)
from stagegen.registry import OperationRegistry, builtin, load_builtins
from stagegen.term import Term, as_bool, as_list, as_nat, as_text, v
from stagegen.types import Nat, Nil, list_from_items, list_items


def test_list_from_group() -> None:
    lst = as_list(Engine().evaluate(list_(v("int, long long, char*"))))
    assert [as_text(item) for item in list_items(lst)] == ["int", "long long", "char*"]


def test_cons_nil_and_accessors() -> None:
    engine = Engine()
    lst = cons(v("a"), cons(v("b"), nil()))
    assert as_nat(engine.evaluate(list_len(lst))) == Nat(2)
    assert engine.evaluate(head(lst)) == v("a")
    assert as_list(engine.evaluate(tail(lst))) == list_from_items([v("b")])
    assert as_bool(engine.evaluate(is_nil(nil())))
    assert not as_bool(engine.evaluate(is_nil(lst)))


def test_head_and_tail_of_nil() -> None:
    with pytest.raises(EmptyListError):
        Engine().evaluate(head(nil()))
    with pytest.raises(EmptyListError):
        Engine().evaluate(tail(nil()))


def _local_registry() -> OperationRegistry:
    registry = load_builtins().child()

    @builtin(arity=0, name="describe_nil", registry=registry)
    def describe_nil() -> Term:
        return v("empty")

    @builtin(arity=2, name="describe_cons", registry=registry)
    def describe_cons(x: Term, xs: Term) -> Term:
        return v(f"starts with {as_text(x)}")

    @builtin(arity=1, name="count_nil", registry=registry)
    def count_nil(n: Term) -> Term:
        return n

    @builtin(arity=3, name="count_cons", registry=registry)
    def count_cons(x: Term, xs: Term, n: Term) -> Term:
        return match_with_state(xs, v("count_nil"), v("count_cons"), v(Nat(as_nat(n).value + 1)))

    @builtin(arity=1, name="shout", registry=registry)
    def shout(x: Term) -> Term:
        return v(as_text(x).upper())

    return registry


def test_match_dispatches_on_constructor() -> None:
    engine = Engine(registry=_local_registry())
    assert engine.evaluate(match(nil(), v("describe_nil"), v("describe_cons"))) == v("empty")
    lst = list_(v("x, y"))
    assert engine.evaluate(match(lst, v("describe_nil"), v("describe_cons"))) == v(
        "starts with x"
    )


def test_match_with_state_threads_accumulator() -> None:
    engine = Engine(registry=_local_registry())
    lst = list_(v("a, b, c, d"))
    result = engine.evaluate(match_with_state(lst, v("count_nil"), v("count_cons"), v(0)))
    assert as_nat(result) == Nat(4)


def test_list_map() -> None:
    engine = Engine(registry=_local_registry())
    lst = as_list(engine.evaluate(list_map(v("shout"), list_(v("a, b")))))
    assert [as_text(item) for item in list_items(lst)] == ["A", "B"]
    assert as_list(engine.evaluate(list_map(v("shout"), nil()))) == Nil()


def test_repeat_counts_up_to_n() -> None:
    assert render(repeat(v(3), v("indexed_item"))) == ", _0 , _1 , _2"
    assert render(repeat(v(0), v("indexed_item"))) == ""
