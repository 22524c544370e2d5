"""Tagged dynamic values as seen by scripts."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any


class ValueKind(StrEnum):
    """Runtime kind tag of a dynamic value."""

    NIL = auto()
    BOOLEAN = auto()
    INTEGER = auto()
    NUMBER = auto()
    STRING = auto()
    USERDATA = auto()
    FUNCTION = auto()
    TYPE = auto()


@dataclass(frozen=True, slots=True, eq=False)
class UserData:
    """Opaque handle owning a bound native instance.

    `type_name` routes field and method access back to the adapter
    registered under that name. Handles compare by identity of the
    instance they own.
    """

    type_name: str
    instance: Any

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserData):
            return NotImplemented
        return self.type_name == other.type_name and self.instance is other.instance

    def __hash__(self) -> int:
        return hash((self.type_name, id(self.instance)))


@dataclass(frozen=True, slots=True, eq=False)
class NativeFunction:
    """A host callable taking and returning dynamic values."""

    name: str
    func: Callable[[list["DynamicValue"]], "DynamicValue"]

    def __call__(self, args: list["DynamicValue"]) -> "DynamicValue":
        return self.func(args)


@dataclass(frozen=True, slots=True)
class TypeNamespace:
    """Static members installed for a bound type: constructors and variants."""

    name: str
    members: Mapping[str, "DynamicValue"]


@dataclass(frozen=True, slots=True)
class DynamicValue:
    """A value of the scripting engine."""

    kind: ValueKind
    payload: Any = None

    @classmethod
    def nil(cls) -> "DynamicValue":
        return NIL

    @classmethod
    def boolean(cls, value: bool) -> "DynamicValue":
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def integer(cls, value: int) -> "DynamicValue":
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def number(cls, value: float) -> "DynamicValue":
        return cls(ValueKind.NUMBER, float(value))

    @classmethod
    def string(cls, value: str) -> "DynamicValue":
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def from_python(cls, value: Any) -> "DynamicValue":
        """Wrap a plain Python scalar, or pass a DynamicValue through."""
        if isinstance(value, DynamicValue):
            return value
        if value is None:
            return NIL
        # bool before int, bool is an int subclass
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.number(value)
        if isinstance(value, str):
            return cls.string(value)
        raise TypeError(f"Cannot wrap {type(value).__name__} as a dynamic value")

    @property
    def is_nil(self) -> bool:
        return self.kind == ValueKind.NIL

    def to_python(self) -> Any:
        """Unwrap scalars; handles unwrap to their native instance."""
        if self.kind == ValueKind.USERDATA:
            return self.payload.instance
        return self.payload

    def __repr__(self) -> str:
        if self.kind == ValueKind.NIL:
            return "nil"
        if self.kind == ValueKind.USERDATA:
            return f"<{self.payload.type_name} userdata>"
        if self.kind in (ValueKind.FUNCTION, ValueKind.TYPE):
            return f"<{self.kind} {self.payload.name}>"
        return repr(self.payload)


NIL = DynamicValue(ValueKind.NIL)
