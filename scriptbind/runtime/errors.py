"""Errors raised by installed adapters while a script runs."""

from enum import StrEnum, auto


class ErrorKind(StrEnum):
    """Structured kind of a runtime binding failure."""

    TYPE_MISMATCH = auto()
    OUT_OF_RANGE = auto()
    ARITY_MISMATCH = auto()
    UNKNOWN_FIELD = auto()
    UNKNOWN_METHOD = auto()
    ALREADY_REGISTERED = auto()
    UNSUPPORTED = auto()


class BindingError(RuntimeError):
    """Raised when a conversion or dispatch fails at run time.

    `name` is the offending field, method, parameter or global name.
    """

    def __init__(self, kind: ErrorKind, name: str, message: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{message} [{kind}: {name}]")
