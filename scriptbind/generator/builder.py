"""Fluent descriptor builder and the shared declaration rules."""

import logging
from collections.abc import Iterable, Sequence
from typing import Self

from .errors import BuildError, BuildErrorKind
from .types import (
    FACETS_BY_KIND,
    PRIMITIVE_TYPES,
    RECEIVER_KEYWORDS,
    SELF_TYPE,
    ExposureSelection,
    FieldDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    ReceiverKind,
    TypeDescriptor,
    TypeKind,
    ValueType,
    VariantDescriptor,
)

logger = logging.getLogger(__name__)

TypeSpec = str | ValueType
NamedTypeSpec = tuple[str, TypeSpec]


def _as_value_type(spec: TypeSpec) -> ValueType:
    if isinstance(spec, ValueType):
        return spec
    return ValueType.parse(spec)


def _as_receiver(receiver: ReceiverKind | str) -> ReceiverKind:
    if isinstance(receiver, str) and receiver in RECEIVER_KEYWORDS:
        return RECEIVER_KEYWORDS[receiver]
    return ReceiverKind(receiver)


def _check_unique(type_name: str, what: str, names: Iterable[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise BuildError(
                BuildErrorKind.DUPLICATE_NAME, type_name, name, f"duplicate {what} name"
            )
        seen.add(name)


def _check_type(
    descriptor: TypeDescriptor, member: str, position: str, t: ValueType, known: set[str]
) -> None:
    if t.name in PRIMITIVE_TYPES or t.name == SELF_TYPE or t.name in known:
        return
    raise BuildError(
        BuildErrorKind.UNSUPPORTED_TYPE,
        descriptor.name,
        member,
        f"{position} has unsupported type '{t}'",
    )


def validate_type(descriptor: TypeDescriptor, known_types: Iterable[str] = ()) -> None:
    """Check a descriptor against the declaration rules.

    `known_types` names the other bound types a member may refer to.
    """
    known = {*known_types, descriptor.name}
    name = descriptor.name

    if descriptor.kind == TypeKind.STRUCT and descriptor.variants:
        raise BuildError(
            BuildErrorKind.UNKNOWN_VARIANT,
            name,
            descriptor.variants[0].name,
            "structures cannot declare variants",
        )
    if descriptor.kind == TypeKind.ENUM and descriptor.fields:
        raise BuildError(
            BuildErrorKind.UNKNOWN_FIELD,
            name,
            descriptor.fields[0].name,
            "enumerations cannot declare fields",
        )

    _check_unique(name, "field", (f.name for f in descriptor.fields))
    _check_unique(name, "method", (m.name for m in descriptor.methods))
    _check_unique(name, "variant", (v.name for v in descriptor.variants))

    for f in descriptor.fields:
        _check_type(descriptor, f.name, f"field '{f.name}'", f.value_type, known)

    for variant in descriptor.variants:
        _check_unique(name, "payload field", (f.name for f in variant.payload_fields))
        for f in variant.payload_fields:
            _check_type(descriptor, variant.name, f"payload field '{f.name}'", f.value_type, known)

    for method in descriptor.methods:
        _check_unique(name, "parameter", (p.name for p in method.parameters))
        for param in method.parameters:
            _check_type(
                descriptor, method.name, f"parameter '{param.name}'", param.value_type, known
            )
        if method.return_type is not None:
            _check_type(descriptor, method.name, "return type", method.return_type, known)


def validate_selection(descriptor: TypeDescriptor, selection: ExposureSelection) -> None:
    """Reject facets the descriptor's kind cannot expose."""
    allowed = FACETS_BY_KIND[descriptor.kind]
    for facet in selection.ordered():
        if facet not in allowed:
            raise BuildError(
                BuildErrorKind.INVALID_SELECTION,
                descriptor.name,
                None,
                f"facet '{facet}' is not available for {descriptor.kind} types",
            )


class TypeBuilder:
    """Describe a bindable type step by step.

    Example:
        player = (
            TypeBuilder.structure("Player")
            .field("name", "text")
            .field("hp", "int32")
            .method("new", receiver="static", params=[("name", "text")], returns="Self")
            .method("take_damage", receiver="mut", params=[("amount", "int32")])
            .build()
        )
    """

    def __init__(self, name: str, kind: TypeKind) -> None:
        self.name = name
        self.kind = kind
        self._fields: list[FieldDescriptor] = []
        self._methods: list[MethodDescriptor] = []
        self._variants: list[VariantDescriptor] = []

    @classmethod
    def structure(cls, name: str) -> Self:
        return cls(name, TypeKind.STRUCT)

    @classmethod
    def enumeration(cls, name: str) -> Self:
        return cls(name, TypeKind.ENUM)

    def field(self, name: str, value_type: TypeSpec) -> Self:
        self._fields.append(FieldDescriptor(name=name, value_type=_as_value_type(value_type)))
        return self

    def variant(self, name: str, *payload: NamedTypeSpec) -> Self:
        self._variants.append(
            VariantDescriptor(
                name=name,
                payload_fields=tuple(
                    FieldDescriptor(name=n, value_type=_as_value_type(t)) for n, t in payload
                ),
            )
        )
        return self

    def method(
        self,
        name: str,
        *,
        receiver: ReceiverKind | str,
        params: Sequence[NamedTypeSpec] = (),
        returns: TypeSpec | None = None,
    ) -> Self:
        self._methods.append(
            MethodDescriptor(
                name=name,
                receiver=_as_receiver(receiver),
                parameters=tuple(
                    ParameterDescriptor(name=n, value_type=_as_value_type(t)) for n, t in params
                ),
                return_type=_as_value_type(returns) if returns is not None else None,
            )
        )
        return self

    def build(self, known_types: Iterable[str] = ()) -> TypeDescriptor:
        """Freeze the description into a validated TypeDescriptor."""
        descriptor = TypeDescriptor(
            name=self.name,
            kind=self.kind,
            fields=tuple(self._fields),
            methods=tuple(self._methods),
            variants=tuple(self._variants),
        )
        validate_type(descriptor, known_types)
        logger.debug(
            "Built %s descriptor %s (%d fields, %d methods, %d variants)",
            descriptor.kind,
            descriptor.name,
            len(descriptor.fields),
            len(descriptor.methods),
            len(descriptor.variants),
        )
        return descriptor
