"""Conversion between native Python values and dynamic values."""

import copy
import math
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from scriptbind.generator.types import (
    INTEGER_RANGES,
    ParameterDescriptor,
    ValueType,
    is_float,
    is_integer,
)

from .errors import BindingError, ErrorKind
from .values import NIL, DynamicValue, UserData, ValueKind

FLOAT32_MAX = 3.4028234663852886e38


def _mismatch(name: str, expected: object, got: str) -> BindingError:
    return BindingError(ErrorKind.TYPE_MISMATCH, name, f"expected {expected}, got {got}")


def _check_int(name: str, t: ValueType, value: int) -> int:
    low, high = INTEGER_RANGES[t.name]
    if not low <= value <= high:
        raise BindingError(
            ErrorKind.OUT_OF_RANGE, name, f"{value} does not fit {t.name} [{low}, {high}]"
        )
    return value


def _check_float(name: str, t: ValueType, value: int | float) -> float:
    try:
        result = float(value)
    except OverflowError:
        raise BindingError(ErrorKind.OUT_OF_RANGE, name, f"integer does not fit {t.name}") from None
    if t.name == "float32" and math.isfinite(result) and abs(result) > FLOAT32_MAX:
        raise BindingError(ErrorKind.OUT_OF_RANGE, name, f"{result} does not fit float32")
    return result


class Converter:
    """Converts values for one registry.

    `natives` maps bound type names to their native classes and `enums`
    names the bound enumerations among them. Both are read, never written,
    by the converter.
    """

    def __init__(self, natives: Mapping[str, type], enums: Collection[str] = ()) -> None:
        self._natives = natives
        self._enums = enums

    def copy_bound(self, value: Any, type_name: str) -> Any:
        """Copy a bound value crossing the boundary.

        Structures cross by value. Enumeration values keep their identity so
        they still compare equal to the variants in the type namespace.
        """
        if type_name in self._enums:
            return value
        return copy.deepcopy(value)

    def _bound_name(self, value: Any) -> str | None:
        for name, native in self._natives.items():
            if type(value) is native:
                return name
        for name, native in self._natives.items():
            if isinstance(value, native):
                return name
        return None

    def to_dynamic(
        self, value: Any, value_type: ValueType | None = None, *, name: str = "value"
    ) -> DynamicValue:
        """Convert a native value, checking it against `value_type` when given."""
        if isinstance(value, DynamicValue):
            return value
        if value_type is None:
            return self._to_dynamic_untyped(value, name)

        if value is None:
            if value_type.optional:
                return NIL
            raise _mismatch(name, value_type, "nothing")

        t = value_type
        if t.name == "bool":
            if not isinstance(value, bool):
                raise _mismatch(name, t, type(value).__name__)
            return DynamicValue.boolean(value)
        if is_integer(t):
            if isinstance(value, bool) or not isinstance(value, int):
                raise _mismatch(name, t, type(value).__name__)
            return DynamicValue.integer(_check_int(name, t, value))
        if is_float(t):
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise _mismatch(name, t, type(value).__name__)
            return DynamicValue.number(_check_float(name, t, value))
        if t.name == "text":
            if not isinstance(value, str):
                raise _mismatch(name, t, type(value).__name__)
            return DynamicValue.string(value)

        native = self._natives.get(t.name)
        if native is None or not isinstance(value, native):
            raise _mismatch(name, t, type(value).__name__)
        return DynamicValue(ValueKind.USERDATA, UserData(t.name, value))

    def _to_dynamic_untyped(self, value: Any, name: str) -> DynamicValue:
        if value is None or isinstance(value, bool | int | float | str):
            return DynamicValue.from_python(value)
        bound = self._bound_name(value)
        if bound is None:
            raise _mismatch(name, "a convertible value", type(value).__name__)
        return DynamicValue(ValueKind.USERDATA, UserData(bound, value))

    def from_dynamic(self, value: DynamicValue, expected: ValueType, *, name: str = "value") -> Any:
        """Convert a dynamic value to the native shape `expected`."""
        t = expected
        if value.kind == ValueKind.NIL:
            if t.optional:
                return None
            raise _mismatch(name, t, "nil")

        if t.name == "bool":
            if value.kind != ValueKind.BOOLEAN:
                raise _mismatch(name, t, value.kind)
            return value.payload
        if is_integer(t):
            if value.kind == ValueKind.INTEGER:
                return _check_int(name, t, value.payload)
            if value.kind == ValueKind.NUMBER:
                if not float(value.payload).is_integer():
                    raise _mismatch(name, t, "number with no integer representation")
                return _check_int(name, t, int(value.payload))
            raise _mismatch(name, t, value.kind)
        if is_float(t):
            if value.kind not in (ValueKind.INTEGER, ValueKind.NUMBER):
                raise _mismatch(name, t, value.kind)
            return _check_float(name, t, value.payload)
        if t.name == "text":
            if value.kind != ValueKind.STRING:
                raise _mismatch(name, t, value.kind)
            return value.payload

        if value.kind != ValueKind.USERDATA:
            raise _mismatch(name, t, value.kind)
        handle: UserData = value.payload
        if handle.type_name != t.name:
            raise _mismatch(name, t, handle.type_name)
        return self.copy_bound(handle.instance, t.name)

    def convert_args(
        self, args: Sequence[DynamicValue], parameters: Sequence[ParameterDescriptor], owner: str
    ) -> list[Any]:
        """Convert an argument list for the callable `owner`."""
        if len(args) != len(parameters):
            raise BindingError(
                ErrorKind.ARITY_MISMATCH,
                owner,
                f"{owner} expects {len(parameters)} arguments, got {len(args)}",
            )
        return [
            self.from_dynamic(arg, param.value_type, name=param.name)
            for arg, param in zip(args, parameters)
        ]
