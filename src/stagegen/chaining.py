"""Statement chaining.

A chaining link expands to a statement prefix: it needs exactly one
statement after it, and together with that statement forms a single
statement again, so links can be stacked without braces::

    for (double x = 5.0, y = 7.0, *stagegen_priv_break = (void *)0; ...)
        for (int stagegen_priv_expr_stmt_break = ((printf("%f", x)), 0); ...)
            puts("abc");

Each link has two faces. ``prefix``/``render`` produce the C text.
``run`` executes the same protocol in Python: the following statement is
passed in as a callable and invoked exactly once, with any introduced
bindings handed over in a fresh scope that is discarded afterwards.
"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from stagegen.errors import TermTypeError
from stagegen.registry import builtin
from stagegen.term import Term, as_text, v

Scope = Mapping[str, Any]
Action = Callable[[Scope], Any]
Effect = Callable[[Scope], Any]

_BREAK = "stagegen_priv_break"
_EXPR_BREAK = "stagegen_priv_expr_stmt_break"


class LinkState(Enum):
    NOT_RUN = "not_run"
    RAN = "ran"


def _run_once(action: Action, scope: Scope) -> Any:
    # Same shape as the emitted loop: the guard flips after one pass.
    state = LinkState.NOT_RUN
    result: Any = None
    while state is LinkState.NOT_RUN:
        state = LinkState.RAN
        result = action(scope)
    return result


class StatementLink:
    def prefix(self) -> str:
        raise NotImplementedError

    def run(self, scope: Scope, action: Action) -> Any:
        raise NotImplementedError

    def render(self, statement: str) -> str:
        return f"{self.prefix()} {statement}"


@dataclass(frozen=True)
class IntroduceVars(StatementLink):
    """Declarations visible to the following statement only.

    ``declarations`` is the first clause of a for-loop, e.g.
    ``"double x = 5.0, y = 7.0"``. ``bindings`` holds the ``(name, value)``
    pairs ``run`` puts in scope, in declaration order; a callable value is
    an initializer and receives the scope built so far.
    """

    declarations: str
    bindings: tuple[tuple[str, Any], ...] = ()

    def prefix(self) -> str:
        return (
            f"for ({self.declarations}, *{_BREAK} = (void *)0; "
            f"{_BREAK} != (void *)1; {_BREAK} = (void *)1)"
        )

    def run(self, scope: Scope, action: Action) -> Any:
        local: dict[str, Any] = {}
        inner = ChainMap(local, dict(scope))
        for name, binding in self.bindings:
            local[name] = binding(inner) if callable(binding) else binding
        return _run_once(action, inner)


@dataclass(frozen=True)
class IntroduceNonNullPtr(StatementLink):
    """A single pointer, initialized once and always referenced.

    ``value`` computes the pointer for ``run``; without it there is
    nothing to bind and ``run`` raises. When ``value`` yields ``None`` the
    following statement is skipped, matching the ``name != NULL`` loop
    condition.
    """

    type_name: str
    name: str
    init: str
    value: Effect | None = None

    def prefix(self) -> str:
        return (
            f"for ({self.type_name} *{self.name} = ({self.init}); "
            f"{self.name} != (void *)0; {self.name} = (void *)0)"
        )

    def run(self, scope: Scope, action: Action) -> Any:
        if self.value is None:
            raise TermTypeError(f"pointer {self.name} has no initializer to run")
        pointer = self.value(scope)
        if pointer is None:
            return None
        return _run_once(action, ChainMap({self.name: pointer}, dict(scope)))


@dataclass(frozen=True)
class ChainExpr(StatementLink):
    """Evaluate ``expr`` once, then run the following statement."""

    expr: str
    effect: Effect | None = None

    def prefix(self) -> str:
        return (
            f"for (int {_EXPR_BREAK} = (({self.expr}), 0); "
            f"{_EXPR_BREAK} != 1; {_EXPR_BREAK} = 1)"
        )

    def run(self, scope: Scope, action: Action) -> Any:
        if self.effect is not None:
            self.effect(scope)
        return _run_once(action, scope)


def suppress_unused(expr: str) -> ChainExpr:
    """Mark ``expr`` as used right before the following statement."""
    return ChainExpr(expr=f"(void){expr}")


@dataclass(frozen=True)
class StatementChain:
    links: tuple[StatementLink, ...] = ()

    def then(self, link: StatementLink) -> StatementChain:
        return StatementChain(links=self.links + (link,))

    def introduce_vars(self, declarations: str, **bindings: Any) -> StatementChain:
        link = IntroduceVars(declarations=declarations, bindings=tuple(bindings.items()))
        return self.then(link)

    def introduce_non_null_ptr(
        self, type_name: str, name: str, init: str, value: Effect | None = None
    ) -> StatementChain:
        return self.then(
            IntroduceNonNullPtr(type_name=type_name, name=name, init=init, value=value)
        )

    def chain_expr(self, expr: str, effect: Effect | None = None) -> StatementChain:
        return self.then(ChainExpr(expr=expr, effect=effect))

    def suppress_unused(self, expr: str) -> StatementChain:
        return self.then(suppress_unused(expr))

    def render(self, statement: str, indent: str = "    ") -> str:
        lines = [indent * depth + link.prefix() for depth, link in enumerate(self.links)]
        lines.append(indent * len(self.links) + statement)
        return "\n".join(lines)

    def run(self, action: Action, scope: Scope | None = None) -> Any:
        def step(index: int, current: Scope) -> Any:
            if index == len(self.links):
                return action(current)
            return self.links[index].run(current, lambda inner: step(index + 1, inner))

        return step(0, dict(scope or {}))


@builtin(arity=1)
def introduce_var_to_stmt(declarations: Term) -> Term:
    return v(IntroduceVars(declarations=as_text(declarations)).prefix())


@builtin(arity=3)
def introduce_non_null_ptr_to_stmt(type_name: Term, name: Term, init: Term) -> Term:
    link = IntroduceNonNullPtr(
        type_name=as_text(type_name), name=as_text(name), init=as_text(init)
    )
    return v(link.prefix())


@builtin(arity=1)
def chain_expr_stmt(expr: Term) -> Term:
    return v(ChainExpr(expr=as_text(expr)).prefix())


@builtin(arity=1)
def suppress_unused_before_stmt(expr: Term) -> Term:
    return v(suppress_unused(as_text(expr)).prefix())
