from __future__ import annotations


class StageError(Exception):
    """Base class for every failure raised while reducing a term."""


class ArityError(StageError, ValueError):
    def __init__(self, op: str, expected: int, got: int) -> None:
        super().__init__(f"operation {op} expects {expected} args, got {got}")
        self.op = op
        self.expected = expected
        self.got = got


class UnknownOperationError(StageError, ValueError):
    def __init__(self, op: str) -> None:
        super().__init__(f"unknown operation {op}")
        self.op = op


class RegistryError(StageError, ValueError):
    pass


class NatUnderflowError(StageError, ValueError):
    pass


class NatRangeError(StageError, ValueError):
    pass


class EmptyListError(StageError, ValueError):
    pass


class VariadicsRangeError(StageError, IndexError):
    pass


class TermTypeError(StageError, TypeError):
    pass


class DepthLimitError(StageError, RuntimeError):
    pass


class StepLimitError(StageError, RuntimeError):
    pass


class ProgramError(StageError, ValueError):
    """A program document or user definition that cannot be compiled."""
