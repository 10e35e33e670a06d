from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from stagegen.canonical import model_hash
from stagegen.config import EngineConfig, default_config
from stagegen.engine import Engine, EvalTrace
from stagegen.errors import ProgramError
from stagegen.registry import Operation, OperationRegistry, load_builtins
from stagegen.term import Invocation, Param, Term, Value, term_from_dict

logger = logging.getLogger(__name__)


class OperationTemplate(BaseModel):
    """A user operation: one rewrite step replaces the call with ``body``."""

    params: list[str] = Field(default_factory=list)
    lazy: list[str] = Field(default_factory=list)
    body: dict[str, Any]
    doc: str | None = None

    @field_validator("params")
    @classmethod
    def _unique_params(cls, params: list[str]) -> list[str]:
        if len(set(params)) != len(params):
            raise ValueError(f"duplicate parameter names in {params}")
        return params

    def to_term(self) -> Term:
        return term_from_dict(self.body)


class ProgramSpec(BaseModel):
    name: str = "program"
    definitions: dict[str, OperationTemplate] = Field(default_factory=dict)
    main: dict[str, Any]

    def main_term(self) -> Term:
        return term_from_dict(self.main)


def substitute(term: Term, mapping: Mapping[str, Term]) -> Term:
    if isinstance(term, Param):
        if term.name not in mapping:
            raise ProgramError(f"unbound parameter {term.name}")
        return mapping[term.name]
    if isinstance(term, Value):
        return term
    if isinstance(term, Invocation):
        args = tuple(substitute(arg, mapping) for arg in term.args)
        return Invocation(op=term.op, args=args)
    raise ProgramError(f"cannot substitute into {term!r}")


def free_params(term: Term) -> set[str]:
    if isinstance(term, Param):
        return {term.name}
    if isinstance(term, Invocation):
        names: set[str] = set()
        for arg in term.args:
            names |= free_params(arg)
        return names
    return set()


def compile_template(name: str, template: OperationTemplate) -> Operation:
    body = template.to_term()
    params = tuple(template.params)
    unknown = free_params(body) - set(params)
    if unknown:
        raise ProgramError(f"operation {name} body uses undeclared params {sorted(unknown)}")
    lazy_unknown = set(template.lazy) - set(params)
    if lazy_unknown:
        raise ProgramError(
            f"operation {name} marks unknown params lazy {sorted(lazy_unknown)}"
        )

    def impl(*args: Term) -> Term:
        return substitute(body, dict(zip(params, args, strict=True)))

    return Operation(
        name=name,
        arity=len(params),
        impl=impl,
        lazy=frozenset(params.index(param) for param in template.lazy),
        doc=template.doc or "",
    )


def compile_definitions(
    spec: ProgramSpec, registry: OperationRegistry | None = None
) -> OperationRegistry:
    base = registry or load_builtins()
    scope = base.child()
    for name, template in spec.definitions.items():
        scope.register(compile_template(name, template))
    logger.debug("compiled %s definitions for %s", len(spec.definitions), spec.name)
    return scope


def load_program(path: Path) -> ProgramSpec:
    text = path.read_text()
    if not text.strip():
        raise ProgramError(f"program file is empty: {path}")
    return ProgramSpec.model_validate(json.loads(text))


def run_program(
    spec: ProgramSpec, config: EngineConfig | None = None
) -> tuple[Value, EvalTrace]:
    registry = compile_definitions(spec)
    engine = Engine(registry=registry, config=config or default_config())
    logger.info("program run start name=%s", spec.name)
    value, trace = engine.run(spec.main_term())
    logger.info("program run complete name=%s steps=%s", spec.name, trace.steps)
    return value, trace


def program_hash(spec: ProgramSpec) -> str:
    return model_hash(spec)
