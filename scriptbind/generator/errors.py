"""Build-time errors raised while describing or synthesizing bindings."""

from enum import StrEnum, auto


class BuildErrorKind(StrEnum):
    """Rule violated by a declaration."""

    DUPLICATE_NAME = auto()
    UNSUPPORTED_TYPE = auto()
    UNKNOWN_TYPE = auto()
    UNKNOWN_FIELD = auto()
    UNKNOWN_METHOD = auto()
    UNKNOWN_VARIANT = auto()
    INVALID_SELECTION = auto()


class BuildError(RuntimeError):
    """Raised when a binding declaration cannot be built.

    These errors stop the build; they are never surfaced to scripts.
    """

    def __init__(
        self, kind: BuildErrorKind, type_name: str, member: str | None, message: str
    ) -> None:
        self.kind = kind
        self.type_name = type_name
        self.member = member
        location = f"{type_name}.{member}" if member else type_name
        super().__init__(f"{location}: {message} [{kind}]")
