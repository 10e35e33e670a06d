from __future__ import annotations

import pytest

from stagegen.engine import Engine
from stagegen.errors import ArityError, NatRangeError, NatUnderflowError
from stagegen.lib.nat import dec, if_, if_eq_zero, inc, is_zero, nat, nat_eq
from stagegen.term import Value, as_bool, as_nat, call, v
from stagegen.types import NAT_MAX, Nat


def test_inc_dec() -> None:
    engine = Engine()
    assert as_nat(engine.evaluate(inc(v(4)))) == Nat(5)
    assert as_nat(engine.evaluate(dec(v(4)))) == Nat(3)
    assert as_nat(engine.evaluate(dec(inc(v(0))))) == Nat(0)


def test_dec_zero_underflows() -> None:
    with pytest.raises(NatUnderflowError):
        Engine().evaluate(dec(v(0)))


def test_inc_past_max_is_rejected() -> None:
    with pytest.raises(NatRangeError):
        Engine().evaluate(inc(v(NAT_MAX)))


def test_nat_construction_range() -> None:
    with pytest.raises(NatRangeError):
        Nat(-1)
    with pytest.raises(NatRangeError):
        Nat(NAT_MAX + 1)
    with pytest.raises(NatRangeError):
        Nat(True)


def test_equality_and_zero() -> None:
    engine = Engine()
    assert as_bool(engine.evaluate(nat_eq(v(3), inc(v(2)))))
    assert not as_bool(engine.evaluate(nat_eq(v(3), v(2))))
    assert as_bool(engine.evaluate(is_zero(v(0))))
    assert not as_bool(engine.evaluate(is_zero(v(7))))


def test_nat_reads_decimal_text() -> None:
    assert Engine().evaluate(nat(v("12"))) == Value(payload=Nat(12))
    with pytest.raises(NatRangeError):
        Engine().evaluate(nat(v("twelve")))


def test_if_eq_zero_reduces_only_selected_branch() -> None:
    engine = Engine()
    # Both untaken branches would fail if they were ever reduced.
    broken_dec = dec(v(0))
    broken_arity = call("struct", v("only_one"))
    assert engine.evaluate(if_eq_zero(v(0), v("A"), broken_dec)) == v("A")
    assert engine.evaluate(if_eq_zero(v(3), broken_arity, v("B"))) == v("B")


def test_if_eq_zero_branch_may_use_predecessor() -> None:
    engine = Engine()
    n = v(0)
    assert engine.evaluate(if_eq_zero(n, v("zero"), dec(n))) == v("zero")
    n = v(6)
    assert engine.evaluate(if_eq_zero(n, v("zero"), dec(n))) == v(5)


def test_if_selects_on_bool() -> None:
    engine = Engine()
    assert engine.evaluate(if_(nat_eq(v(1), v(1)), v("yes"), dec(v(0)))) == v("yes")
    assert engine.evaluate(if_(v(False), dec(v(0)), v("no"))) == v("no")


def test_selected_branch_is_still_checked() -> None:
    with pytest.raises(ArityError):
        Engine().evaluate(if_eq_zero(v(0), call("struct", v("x")), v("B")))
