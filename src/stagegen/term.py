from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from stagegen.errors import ProgramError, TermTypeError
from stagegen.types import (
    Cons,
    List,
    Nat,
    Nil,
    Variadics,
    list_from_items,
    split_variadics,
)

Payload = Union[str, bool, Nat, Variadics, Nil, Cons]


class Term:
    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class Value(Term):
    payload: Payload

    def to_dict(self) -> dict[str, Any]:
        return {"type": "value", "value": payload_to_dict(self.payload)}


@dataclass(frozen=True)
class Invocation(Term):
    op: str
    args: tuple[Term, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "call",
            "op": self.op,
            "args": [arg.to_dict() for arg in self.args],
        }


@dataclass(frozen=True)
class Param(Term):
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "param", "name": self.name}


def v(payload: Payload) -> Value:
    if isinstance(payload, int) and not isinstance(payload, bool):
        payload = Nat(payload)
    return Value(payload=payload)


def call(op: str, *args: Term) -> Invocation:
    """Build an invocation by name; arity is checked on dispatch."""
    return Invocation(op=op, args=tuple(args))


def payload_to_dict(payload: Payload) -> dict[str, Any]:
    if isinstance(payload, bool):
        return {"kind": "bool", "value": payload}
    if isinstance(payload, str):
        return {"kind": "text", "value": payload}
    if isinstance(payload, Nat):
        return {"kind": "nat", "value": payload.value}
    if isinstance(payload, Variadics):
        return {"kind": "variadics", "items": list(payload.items)}
    if isinstance(payload, (Nil, Cons)):
        return {"kind": "list", "items": [item.to_dict() for item in payload]}
    raise TermTypeError(f"unsupported payload {payload!r}")


def payload_from_dict(payload: dict[str, Any]) -> Payload:
    if not isinstance(payload, dict):
        raise ProgramError(f"payload must be an object, got {payload!r}")
    kind = payload.get("kind")
    if kind in {"bool", "text", "nat"} and "value" not in payload:
        raise ProgramError(f"{kind} payload is missing 'value'")
    if kind == "bool":
        return bool(payload["value"])
    if kind == "text":
        return str(payload["value"])
    if kind == "nat":
        try:
            number = int(payload["value"])
        except (TypeError, ValueError) as exc:
            raise ProgramError(f"nat payload needs an integer: {exc}") from exc
        return Nat(number)
    if kind == "variadics":
        return Variadics(items=tuple(str(item) for item in payload.get("items", [])))
    if kind == "list":
        return list_from_items(term_from_dict(item) for item in payload.get("items", []))
    raise ProgramError(f"unknown payload kind {kind}")


def term_from_dict(payload: dict[str, Any]) -> Term:
    if not isinstance(payload, dict):
        raise ProgramError(f"term must be an object, got {payload!r}")
    node_type = payload.get("type")
    try:
        if node_type == "value":
            return Value(payload=payload_from_dict(payload["value"]))
        if node_type == "call":
            args_payload = payload.get("args", [])
            if not isinstance(args_payload, list):
                raise ProgramError(f"call args must be a list, got {args_payload!r}")
            args = tuple(term_from_dict(arg) for arg in args_payload)
            return Invocation(op=str(payload["op"]), args=args)
        if node_type == "param":
            return Param(name=str(payload["name"]))
    except KeyError as exc:
        raise ProgramError(f"{node_type} term is missing {exc}") from exc
    raise ProgramError(f"unknown term type {node_type}")


def term_to_dict(term: Term) -> dict[str, Any]:
    return term.to_dict()


def payload_to_str(payload: Payload) -> str:
    if isinstance(payload, bool):
        return "true" if payload else "false"
    if isinstance(payload, (Nil, Cons)):
        return "[" + ", ".join(term_to_str(item) for item in payload) + "]"
    return str(payload)


def term_to_str(term: Term) -> str:
    if isinstance(term, Value):
        return payload_to_str(term.payload)
    if isinstance(term, Invocation):
        args = ", ".join(term_to_str(arg) for arg in term.args)
        return f"{term.op}({args})"
    if isinstance(term, Param):
        return f"${term.name}"
    raise ValueError("unknown term")


def term_depth(term: Term) -> int:
    if isinstance(term, (Value, Param)):
        return 0
    if isinstance(term, Invocation):
        return 1 + max((term_depth(arg) for arg in term.args), default=0)
    raise ValueError("unknown term")


def _expect_value(term: Term, kind: str) -> Value:
    if not isinstance(term, Value):
        raise TermTypeError(f"expected a {kind} value, got {term_to_str(term)}")
    return term


def as_text(term: Term) -> str:
    value = _expect_value(term, "text")
    payload = value.payload
    if isinstance(payload, bool):
        raise TermTypeError("expected text, got bool")
    if isinstance(payload, (str, Nat, Variadics)):
        return str(payload)
    raise TermTypeError(f"expected text, got {payload_to_str(payload)}")


def as_nat(term: Term) -> Nat:
    payload = _expect_value(term, "nat").payload
    if isinstance(payload, Nat):
        return payload
    if isinstance(payload, str) and payload.strip().isdigit():
        return Nat(int(payload.strip()))
    raise TermTypeError(f"expected nat, got {payload_to_str(payload)}")


def as_bool(term: Term) -> bool:
    payload = _expect_value(term, "bool").payload
    if isinstance(payload, bool):
        return payload
    raise TermTypeError(f"expected bool, got {payload_to_str(payload)}")


def as_list(term: Term) -> List:
    payload = _expect_value(term, "list").payload
    if isinstance(payload, (Nil, Cons)):
        return payload
    raise TermTypeError(f"expected list, got {payload_to_str(payload)}")


def as_variadics(term: Term) -> Variadics:
    payload = _expect_value(term, "variadics").payload
    if isinstance(payload, Variadics):
        return payload
    if isinstance(payload, str):
        return split_variadics(payload)
    raise TermTypeError(f"expected variadics, got {payload_to_str(payload)}")
