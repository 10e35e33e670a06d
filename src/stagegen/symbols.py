from __future__ import annotations

import threading
from dataclasses import dataclass, field

from stagegen.engine import Engine
from stagegen.lib.variadics import cat
from stagegen.term import as_text, v


@dataclass
class SymbolGenerator:
    """Fresh identifiers for generated code.

    ``gen_sym("MY_MACRO_", "x")`` yields ``MY_MACRO_x_0``, then
    ``MY_MACRO_x_1`` and so on. The counter belongs to the generator, so
    two generators are independent sessions.
    """

    start: int = 0
    _counter: int = field(init=False, default=0)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("symbol counter cannot start below zero")
        self._counter = self.start

    @property
    def counter(self) -> int:
        return self._counter

    def next_id(self) -> int:
        with self._lock:
            value = self._counter
            self._counter += 1
        return value

    def gen_sym(self, prefix: str, ident: str, engine: Engine | None = None) -> str:
        engine = engine or Engine()
        term = cat(v(prefix), cat(v(ident), cat(v("_"), v(str(self.next_id())))))
        return as_text(engine.evaluate(term))

    def reset(self) -> None:
        with self._lock:
            self._counter = self.start
