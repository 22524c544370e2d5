"""Adapter synthesis: descriptors in, object-protocol dispatch tables out."""

import dataclasses
import enum
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from scriptbind.generator.builder import validate_selection, validate_type
from scriptbind.generator.errors import BuildError, BuildErrorKind
from scriptbind.generator.types import (
    ExposureSelection,
    Facet,
    FieldDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    ReceiverKind,
    TypeDescriptor,
    TypeKind,
    VariantDescriptor,
    is_primitive,
    resolve_self,
)

from .convert import Converter
from .errors import BindingError, ErrorKind
from .values import NIL, DynamicValue, NativeFunction, TypeNamespace, UserData, ValueKind

logger = logging.getLogger(__name__)

Getter = Callable[[Any], DynamicValue]
Method = Callable[[UserData, list[DynamicValue]], DynamicValue]


@dataclass(frozen=True)
class Adapter:
    """Runtime object protocol for one bound type.

    All tables are read-only views, so nested calls from native code back
    into the engine cannot disturb them.
    """

    name: str
    kind: TypeKind
    native: type
    facets: tuple[Facet, ...]
    getters: Mapping[str, Getter]
    methods: Mapping[str, Method]
    namespace: TypeNamespace

    def index(self, handle: UserData, key: str) -> DynamicValue:
        getter = self.getters.get(key)
        if getter is not None:
            return getter(handle.instance)
        if key in self.methods:
            return self._unbound_method(key)
        raise BindingError(ErrorKind.UNKNOWN_FIELD, key, f"{self.name} has no field '{key}'")

    def set_index(self, handle: UserData, key: str, value: DynamicValue) -> None:
        if key in self.getters:
            raise BindingError(
                ErrorKind.UNSUPPORTED, key, f"{self.name}.{key} cannot be assigned from scripts"
            )
        raise BindingError(ErrorKind.UNKNOWN_FIELD, key, f"{self.name} has no field '{key}'")

    def invoke(self, handle: UserData, key: str, args: list[DynamicValue]) -> DynamicValue:
        method = self.methods.get(key)
        if method is None:
            raise BindingError(ErrorKind.UNKNOWN_METHOD, key, f"{self.name} has no method '{key}'")
        return method(handle, args)

    def _unbound_method(self, key: str) -> DynamicValue:
        """`obj.method` looked up without a call: the receiver comes first."""
        method = self.methods[key]

        def call(args: list[DynamicValue]) -> DynamicValue:
            receiver = args[0] if args else NIL
            if receiver.kind != ValueKind.USERDATA or receiver.payload.type_name != self.name:
                raise BindingError(
                    ErrorKind.TYPE_MISMATCH,
                    "self",
                    f"expected {self.name} receiver, got {receiver.kind}",
                )
            return method(receiver.payload, args[1:])

        return DynamicValue(ValueKind.FUNCTION, NativeFunction(f"{self.name}.{key}", call))


def _resolve_params(
    params: Iterable[ParameterDescriptor], owner: str
) -> tuple[ParameterDescriptor, ...]:
    return tuple(
        ParameterDescriptor(name=p.name, value_type=resolve_self(p.value_type, owner))
        for p in params
    )


def _field_getter(
    descriptor: TypeDescriptor, field: FieldDescriptor, converter: Converter
) -> Getter:
    value_type = resolve_self(field.value_type, descriptor.name)
    by_value = not is_primitive(value_type)
    name = field.name

    def get(instance: Any) -> DynamicValue:
        value = getattr(instance, name)
        if by_value:
            value = converter.copy_bound(value, value_type.name)
        return converter.to_dynamic(value, value_type, name=name)

    return get


def _native_member(descriptor: TypeDescriptor, native: type, name: str, what: str) -> Any:
    member = getattr(native, name, None)
    if member is None or not callable(member):
        kind = BuildErrorKind.UNKNOWN_METHOD if what == "method" else BuildErrorKind.UNKNOWN_VARIANT
        raise BuildError(kind, descriptor.name, name, f"{native.__name__} has no callable {what}")
    return member


def _method(
    descriptor: TypeDescriptor, method: MethodDescriptor, native: type, converter: Converter
) -> Callable[..., DynamicValue]:
    func = _native_member(descriptor, native, method.name, "method")
    owner = f"{descriptor.name}.{method.name}"
    params = _resolve_params(method.parameters, descriptor.name)
    return_type = resolve_self(method.return_type, descriptor.name)

    def finish(result: Any) -> DynamicValue:
        if return_type is None:
            return NIL
        return converter.to_dynamic(result, return_type, name=owner)

    if method.receiver == ReceiverKind.STATIC:

        def call_static(args: list[DynamicValue]) -> DynamicValue:
            native_args = converter.convert_args(args, params, owner)
            return finish(func(*native_args))

        return call_static

    by_value = method.receiver == ReceiverKind.BY_VALUE

    def call(handle: UserData, args: list[DynamicValue]) -> DynamicValue:
        native_args = converter.convert_args(args, params, owner)
        receiver = handle.instance
        if by_value:
            receiver = converter.copy_bound(receiver, handle.type_name)
        return finish(func(receiver, *native_args))

    return call


def _variant_value(descriptor: TypeDescriptor, native: type, variant: VariantDescriptor) -> Any:
    try:
        if isinstance(native, type) and issubclass(native, enum.Enum):
            return native[variant.name]
        return getattr(native, variant.name)
    except (KeyError, AttributeError):
        raise BuildError(
            BuildErrorKind.UNKNOWN_VARIANT,
            descriptor.name,
            variant.name,
            f"{native.__name__} has no such variant",
        ) from None


def _variant_constructor(
    descriptor: TypeDescriptor, variant: VariantDescriptor, native: type, converter: Converter
) -> Callable[[list[DynamicValue]], DynamicValue]:
    func = _native_member(descriptor, native, variant.name, "variant")
    owner = f"{descriptor.name}.{variant.name}"
    params = _resolve_params(
        (ParameterDescriptor(name=f.name, value_type=f.value_type) for f in variant.payload_fields),
        descriptor.name,
    )

    def construct(args: list[DynamicValue]) -> DynamicValue:
        native_args = converter.convert_args(args, params, owner)
        return DynamicValue(ValueKind.USERDATA, UserData(descriptor.name, func(*native_args)))

    return construct


def _check_native_fields(descriptor: TypeDescriptor, native: type) -> None:
    if not dataclasses.is_dataclass(native):
        return
    declared = {f.name for f in dataclasses.fields(native)}
    for field in descriptor.fields:
        if field.name not in declared:
            raise BuildError(
                BuildErrorKind.UNKNOWN_FIELD,
                descriptor.name,
                field.name,
                f"{native.__name__} has no such field",
            )


def _claim_names(descriptor: TypeDescriptor, selection: ExposureSelection) -> None:
    members = {
        Facet.FIELDS: descriptor.fields,
        Facet.METHODS: descriptor.methods,
        Facet.VARIANTS: descriptor.variants,
    }
    claimed: dict[str, Facet] = {}
    for facet in selection.ordered():
        for member in members[facet]:
            if member.name in claimed:
                raise BuildError(
                    BuildErrorKind.DUPLICATE_NAME,
                    descriptor.name,
                    member.name,
                    f"{facet} member collides with a {claimed[member.name]} member",
                )
            claimed[member.name] = facet


def synthesize(
    descriptor: TypeDescriptor,
    selection: ExposureSelection,
    native: type,
    converter: Converter,
    known_types: Iterable[str] = (),
) -> Adapter:
    """Build the adapter for `descriptor`, exposing the selected facets.

    Facets install in the order fields, methods, variants. A name claimed
    by two facets is a DUPLICATE_NAME build error.
    """
    validate_type(descriptor, known_types)
    validate_selection(descriptor, selection)

    _claim_names(descriptor, selection)

    getters: dict[str, Getter] = {}
    methods: dict[str, Method] = {}
    statics: dict[str, DynamicValue] = {}

    for facet in selection.ordered():
        if facet == Facet.FIELDS:
            _check_native_fields(descriptor, native)
            for field in descriptor.fields:
                getters[field.name] = _field_getter(descriptor, field, converter)

        elif facet == Facet.METHODS:
            for method in descriptor.methods:
                call = _method(descriptor, method, native, converter)
                if method.is_static:
                    statics[method.name] = DynamicValue(
                        ValueKind.FUNCTION,
                        NativeFunction(f"{descriptor.name}.{method.name}", call),
                    )
                else:
                    methods[method.name] = call

        elif facet == Facet.VARIANTS:
            for variant in descriptor.variants:
                if variant.is_unit:
                    value = _variant_value(descriptor, native, variant)
                    statics[variant.name] = DynamicValue(
                        ValueKind.USERDATA, UserData(descriptor.name, value)
                    )
                else:
                    statics[variant.name] = DynamicValue(
                        ValueKind.FUNCTION,
                        NativeFunction(
                            f"{descriptor.name}.{variant.name}",
                            _variant_constructor(descriptor, variant, native, converter),
                        ),
                    )

    logger.debug(
        "Synthesized %s adapter: %d fields, %d methods, %d static members",
        descriptor.name,
        len(getters),
        len(methods),
        len(statics),
    )
    return Adapter(
        name=descriptor.name,
        kind=descriptor.kind,
        native=native,
        facets=tuple(selection.ordered()),
        getters=MappingProxyType(getters),
        methods=MappingProxyType(methods),
        namespace=TypeNamespace(name=descriptor.name, members=MappingProxyType(statics)),
    )
