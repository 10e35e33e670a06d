from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from stagegen.config import EngineConfig, default_config
from stagegen.errors import ArityError, DepthLimitError, StepLimitError, TermTypeError
from stagegen.registry import Operation, OperationRegistry, load_builtins
from stagegen.term import Invocation, Param, Term, Value, as_text, term_to_str

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvalTrace:
    steps: int
    max_depth: int
    events: list[dict[str, Any]]


@dataclass
class Engine:
    """Reduces terms to values, one dispatch per rewrite step.

    Arguments are reduced before their invocation is dispatched, except at
    positions an operation declares lazy; those are handed to the
    operation untouched, so a branch that is not selected is never
    rewritten.
    """

    registry: OperationRegistry = field(default_factory=load_builtins)
    config: EngineConfig = field(default_factory=default_config)

    def dispatch(self, op_name: str, args: Sequence[Term]) -> Term:
        op = self.registry.get(op_name)
        return op.apply(tuple(args))

    def evaluate(self, term: Term) -> Value:
        value, _trace = self.run(term)
        return value

    def run(self, term: Term, *, trace: bool | None = None) -> tuple[Value, EvalTrace]:
        record_events = self.config.trace if trace is None else trace
        max_depth = self.config.max_depth
        max_steps = self.config.max_steps
        steps = 0
        deepest = 0
        events: list[dict[str, Any]] = []

        def record(event: str, payload: dict[str, Any]) -> None:
            if record_events:
                events.append({"step": steps, "event": event, "payload": payload})

        def tick(op_name: str, depth: int) -> None:
            nonlocal steps
            steps += 1
            if steps > max_steps:
                raise StepLimitError(
                    f"step limit {max_steps} exceeded while reducing {op_name}"
                )
            record("dispatch", {"op": op_name, "depth": depth})

        def reduce(root: Term) -> Value:
            # Pending invocations live on an explicit stack, so nesting is
            # bounded by max_depth alone and not by the interpreter's stack.
            nonlocal deepest
            frames: list[_Frame] = []
            current: Term = root
            depth = 0
            while True:
                if depth > max_depth:
                    raise DepthLimitError(
                        f"depth limit {max_depth} exceeded while reducing "
                        f"{_describe(current)}"
                    )
                deepest = max(deepest, depth)
                if isinstance(current, Invocation):
                    op = self.registry.get(current.op)
                    if len(current.args) != op.arity:
                        raise ArityError(op.name, op.arity, len(current.args))
                    frames.append(_Frame(op=op, pending=current.args, depth=depth))
                elif isinstance(current, Value):
                    if not frames:
                        return current
                    frames[-1].ready.append(current)
                elif isinstance(current, Param):
                    raise TermTypeError(f"unbound parameter {current.name}")
                else:
                    raise TermTypeError(f"cannot reduce {current!r}")

                frame = frames[-1]
                while frame.waiting() and frame.position() in frame.op.lazy:
                    frame.ready.append(frame.pending[frame.position()])
                if frame.waiting():
                    current = frame.pending[frame.position()]
                    depth = frame.depth + 1
                    continue
                frames.pop()
                tick(frame.op.name, frame.depth)
                current = self.dispatch(frame.op.name, frame.ready)
                depth = frame.depth

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("evaluate start term=%s", _describe(term))
        value = reduce(term)
        logger.debug("evaluate complete steps=%s depth=%s", steps, deepest)
        return value, EvalTrace(steps=steps, max_depth=deepest, events=events)


@dataclass
class _Frame:
    """An invocation whose arguments are still being reduced."""

    op: Operation
    pending: tuple[Term, ...]
    depth: int
    ready: list[Term] = field(default_factory=list)

    def position(self) -> int:
        return len(self.ready)

    def waiting(self) -> bool:
        return len(self.ready) < len(self.pending)


def _describe(term: Term) -> str:
    text = term_to_str(term)
    if len(text) > 120:
        return text[:117] + "..."
    return text


def evaluate(term: Term, config: EngineConfig | None = None) -> Value:
    engine = Engine(config=config or default_config())
    return engine.evaluate(term)


def render(term: Term, config: EngineConfig | None = None) -> str:
    return as_text(evaluate(term, config))
