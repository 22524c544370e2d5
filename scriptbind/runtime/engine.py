"""In-process reference scripting engine.

The engine owns a globals namespace and the userdata types registered
into it. Scripts are modelled as calls against the engine: `index` is
`a.b`, `invoke` is `a:b(...)`, `call` is `f(...)`. Failures raised by
adapters surface as `ScriptError`, which `pcall` catches the way Lua's
`pcall` does.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from .errors import BindingError, ErrorKind
from .values import NIL, DynamicValue, NativeFunction, TypeNamespace, UserData, ValueKind

logger = logging.getLogger(__name__)


class UserDataType(Protocol):
    """Object protocol a bound type implements for the engine."""

    name: str
    namespace: TypeNamespace

    def index(self, handle: UserData, key: str) -> DynamicValue: ...

    def set_index(self, handle: UserData, key: str, value: DynamicValue) -> None: ...

    def invoke(self, handle: UserData, key: str, args: list[DynamicValue]) -> DynamicValue: ...


class ScriptError(RuntimeError):
    """The engine's error mechanism, as seen by scripts.

    `kind` and `name` carry the structured binding failure; both are None
    when a native callback raised an ordinary exception.
    """

    def __init__(
        self, message: str, kind: ErrorKind | None = None, name: str | None = None
    ) -> None:
        self.kind = kind
        self.name = name
        super().__init__(message)


@contextmanager
def _guard(operation: str) -> Iterator[None]:
    try:
        yield
    except ScriptError:
        raise
    except BindingError as e:
        raise ScriptError(str(e), kind=e.kind, name=e.name) from e
    except Exception as e:
        raise ScriptError(f"error in {operation}: {e}") from e


class ScriptEngine:
    """A single engine instance with its own globals and registered types."""

    def __init__(self) -> None:
        self._globals: dict[str, DynamicValue] = {}
        self._types: dict[str, UserDataType] = {}

    def has_global(self, name: str) -> bool:
        return name in self._globals

    def get_global(self, name: str) -> DynamicValue:
        return self._globals.get(name, NIL)

    def set_global(self, name: str, value: Any) -> None:
        self._globals[name] = DynamicValue.from_python(value)

    def create_function(
        self, name: str, func: Callable[[list[DynamicValue]], DynamicValue]
    ) -> DynamicValue:
        return DynamicValue(ValueKind.FUNCTION, NativeFunction(name, func))

    def register_type(self, userdata_type: UserDataType) -> DynamicValue:
        """Install a userdata type and publish its namespace as a global."""
        value = DynamicValue(ValueKind.TYPE, userdata_type.namespace)
        self._types[userdata_type.name] = userdata_type
        self._globals[userdata_type.name] = value
        logger.debug("Registered userdata type %s", userdata_type.name)
        return value

    def _type_of(self, handle: UserData) -> UserDataType:
        try:
            return self._types[handle.type_name]
        except KeyError:
            raise ScriptError(f"userdata type '{handle.type_name}' is not registered") from None

    def index(self, target: DynamicValue, key: str) -> DynamicValue:
        """`target.key`"""
        with _guard(f"index '{key}'"):
            if target.kind == ValueKind.USERDATA:
                return self._type_of(target.payload).index(target.payload, key)
            if target.kind == ValueKind.TYPE:
                namespace: TypeNamespace = target.payload
                if key not in namespace.members:
                    raise BindingError(
                        ErrorKind.UNKNOWN_METHOD, key, f"{namespace.name} has no member '{key}'"
                    )
                return namespace.members[key]
        raise ScriptError(f"attempt to index a {target.kind} value (key '{key}')")

    def set_index(self, target: DynamicValue, key: str, value: Any) -> None:
        """`target.key = value`"""
        if target.kind != ValueKind.USERDATA:
            raise ScriptError(f"attempt to assign into a {target.kind} value (key '{key}')")
        with _guard(f"assign '{key}'"):
            self._type_of(target.payload).set_index(
                target.payload, key, DynamicValue.from_python(value)
            )

    def call(self, func: DynamicValue, *args: Any) -> DynamicValue:
        """`func(args...)`"""
        if func.kind != ValueKind.FUNCTION:
            raise ScriptError(f"attempt to call a {func.kind} value")
        native: NativeFunction = func.payload
        with _guard(f"call to '{native.name}'"):
            result = native([DynamicValue.from_python(a) for a in args])
        return result

    def invoke(self, target: DynamicValue, method: str, *args: Any) -> DynamicValue:
        """`target:method(args...)`"""
        if target.kind != ValueKind.USERDATA:
            raise ScriptError(f"attempt to call method '{method}' on a {target.kind} value")
        with _guard(f"method '{method}'"):
            result = self._type_of(target.payload).invoke(
                target.payload, method, [DynamicValue.from_python(a) for a in args]
            )
        return result

    def equals(self, a: Any, b: Any) -> bool:
        """`a == b`"""
        return DynamicValue.from_python(a) == DynamicValue.from_python(b)

    def pcall(self, op: Callable[..., Any], *args: Any) -> tuple[bool, Any]:
        """Run an engine operation, catching script errors.

        Returns (True, result) or (False, ScriptError).
        """
        try:
            return True, op(*args)
        except ScriptError as e:
            return False, e
