from __future__ import annotations

from stagegen.errors import NatRangeError, NatUnderflowError
from stagegen.registry import builtin
from stagegen.term import Term, Value, as_bool, as_nat, as_text, v
from stagegen.types import NAT_MAX, Nat


@builtin(arity=1)
def inc(n: Term) -> Term:
    """n + 1"""
    value = as_nat(n).value
    if value >= NAT_MAX:
        raise NatRangeError(f"inc({value}) exceeds {NAT_MAX}")
    return v(Nat(value + 1))


@builtin(arity=1)
def dec(n: Term) -> Term:
    """n - 1; zero has no predecessor"""
    value = as_nat(n).value
    if value == 0:
        raise NatUnderflowError("dec(0): counter already at zero")
    return v(Nat(value - 1))


@builtin(arity=2)
def nat_eq(n: Term, m: Term) -> Term:
    """n == m"""
    return v(as_nat(n) == as_nat(m))


@builtin(arity=1)
def is_zero(n: Term) -> Term:
    return v(as_nat(n).value == 0)


@builtin(arity=1)
def nat(x: Term) -> Term:
    """Read a decimal literal as a counter."""
    if isinstance(x, Value) and isinstance(x.payload, Nat):
        return x
    text = as_text(x).strip()
    if not text.isdigit():
        raise NatRangeError(f"not a natural number literal: {text!r}")
    return v(Nat(int(text)))


@builtin(arity=3, name="if", lazy=(1, 2))
def if_(cond: Term, then_branch: Term, else_branch: Term) -> Term:
    """Select one branch without reducing the other."""
    return then_branch if as_bool(cond) else else_branch


@builtin(arity=3, lazy=(1, 2))
def if_eq_zero(n: Term, then_branch: Term, else_branch: Term) -> Term:
    return then_branch if as_nat(n).value == 0 else else_branch
