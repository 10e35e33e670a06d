from __future__ import annotations

import os
from dataclasses import dataclass, replace

_DEFAULT_MAX_DEPTH = 512
_DEFAULT_MAX_STEPS = 100_000


@dataclass(frozen=True)
class EngineConfig:
    max_depth: int = _DEFAULT_MAX_DEPTH
    max_steps: int = _DEFAULT_MAX_STEPS
    trace: bool = False

    def with_overrides(
        self,
        *,
        max_depth: int | None = None,
        max_steps: int | None = None,
        trace: bool | None = None,
    ) -> EngineConfig:
        return replace(
            self,
            max_depth=self.max_depth if max_depth is None else max_depth,
            max_steps=self.max_steps if max_steps is None else max_steps,
            trace=self.trace if trace is None else trace,
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def default_config() -> EngineConfig:
    return EngineConfig(
        max_depth=_env_int("STAGEGEN_MAX_DEPTH", _DEFAULT_MAX_DEPTH),
        max_steps=_env_int("STAGEGEN_MAX_STEPS", _DEFAULT_MAX_STEPS),
        trace=_env_flag("STAGEGEN_TRACE"),
    )
