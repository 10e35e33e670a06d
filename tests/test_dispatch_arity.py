from __future__ import annotations

import pytest

from stagegen.engine import Engine
from stagegen.errors import ArityError, UnknownOperationError
from stagegen.lib.gen import struct
from stagegen.lib.nat import inc
from stagegen.registry import load_builtins
from stagegen.term import Invocation, Value, call, term_depth, term_to_dict, v
from stagegen.types import Nat


def test_operation_call_checks_arity_at_construction() -> None:
    with pytest.raises(ArityError) as excinfo:
        struct(v("Point"))
    assert excinfo.value.expected == 2
    assert excinfo.value.got == 1


def test_dispatch_checks_arity_of_named_invocation() -> None:
    engine = Engine()
    with pytest.raises(ArityError):
        engine.dispatch("inc", (v(1), v(2)))
    with pytest.raises(ArityError):
        engine.evaluate(call("struct", v("Point")))


def test_unknown_operation() -> None:
    engine = Engine()
    with pytest.raises(UnknownOperationError):
        engine.evaluate(call("no_such_op", v("x")))


def test_dispatch_is_a_single_rewrite_step() -> None:
    engine = Engine()
    step = engine.dispatch("repeat", (v(2), v("indexed_item")))
    assert isinstance(step, Invocation)
    assert step.op == "repeat_progress"


def test_arity_record_lookup() -> None:
    registry = load_builtins()
    assert registry.arity("struct") == 2
    assert registry.arity("anon_struct") == 1
    assert registry.arity("indexed_params") == 1
    assert registry.arity("nil") == 0
    assert registry.arity("match_with_state") == 4


def test_arguments_reduced_before_dispatch() -> None:
    engine = Engine()
    value, trace = engine.run(inc(inc(v(0))), trace=True)
    assert value == Value(payload=Nat(2))
    assert [event["payload"]["op"] for event in trace.events] == ["inc", "inc"]
    assert trace.events[0]["payload"]["depth"] == 1


def test_registry_membership_and_term_shape() -> None:
    registry = load_builtins()
    assert "indexed_fields" in registry
    assert "indexedFields" not in registry
    term = struct(v("Point"), inc(v(1)))
    assert term_depth(term) == 2
    assert term_to_dict(term)["op"] == "struct"
