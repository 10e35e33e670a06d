from __future__ import annotations

import pytest

from stagegen.engine import Engine, render
from stagegen.errors import TermTypeError, VariadicsRangeError
from stagegen.lib.variadics import (
    cat,
    empty,
    terms,
    tuple_,
    untuple,
    variadics,
    variadics_count,
    variadics_drop,
    variadics_get,
    variadics_tail,
)
from stagegen.term import as_nat, as_variadics, v
from stagegen.types import Nat, Variadics, split_variadics


def test_split_keeps_nested_commas() -> None:
    group = split_variadics("int (*)(int, char), long, struct { int a, b; }")
    assert group.items == ("int (*)(int, char)", "long", "struct { int a, b; }")
    assert split_variadics("   ") == Variadics()


def test_count_and_get() -> None:
    engine = Engine()
    assert as_nat(engine.evaluate(variadics_count(v("a, b, c")))) == Nat(3)
    assert engine.evaluate(variadics_get(v(1), v("a, b, c"))) == v("b")
    with pytest.raises(VariadicsRangeError):
        engine.evaluate(variadics_get(v(3), v("a, b, c")))


def test_tail_strips_leading_separator() -> None:
    value = Engine().evaluate(variadics_tail(v(", int _0 , long _1")))
    assert as_variadics(value).items == ("int _0", "long _1")
    with pytest.raises(VariadicsRangeError):
        Engine().evaluate(variadics_tail(v(Variadics())))


def test_drop() -> None:
    assert render(variadics_drop(v(2), v("a, b, c, d"))) == "c, d"
    assert render(variadics_drop(v(0), v("a, b"))) == "a, b"
    with pytest.raises(VariadicsRangeError):
        render(variadics_drop(v(3), v("a, b")))


def test_tuple_and_untuple() -> None:
    assert render(tuple_(variadics(v("int x,long y")))) == "(int x, long y)"
    assert render(untuple(v("(a, (b, c))"))) == "a, (b, c)"
    with pytest.raises(TermTypeError):
        render(untuple(v("a, b")))


def test_terms_and_cat() -> None:
    assert render(terms(v("int _0;"), v("long _1;"))) == "int _0; long _1;"
    assert render(terms(empty(), v("x"))) == "x"
    assert render(terms(v("x"), empty())) == "x"
    assert render(cat(v("MY_"), cat(v("x"), v("_3")))) == "MY_x_3"
