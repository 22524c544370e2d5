"""Descriptor types for bindable native types.

Descriptors are produced by the builder or the declaration parser and
consumed by the adapter synthesizer. They are frozen once built.
"""

from dataclasses import dataclass
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin

from .errors import BuildError, BuildErrorKind

SELF_TYPE = "Self"

# Inclusive integer ranges, keyed by primitive name
INTEGER_RANGES: dict[str, tuple[int, int]] = {
    "int8": (-(2**7), 2**7 - 1),
    "int16": (-(2**15), 2**15 - 1),
    "int32": (-(2**31), 2**31 - 1),
    "int64": (-(2**63), 2**63 - 1),
    "uint8": (0, 2**8 - 1),
    "uint16": (0, 2**16 - 1),
    "uint32": (0, 2**32 - 1),
    "uint64": (0, 2**64 - 1),
}

FLOAT_TYPES = frozenset(["float32", "float64"])

PRIMITIVE_TYPES = frozenset([*INTEGER_RANGES, *FLOAT_TYPES, "bool", "text"])


class TypeKind(StrEnum):
    """Kind of a bindable native type."""

    STRUCT = auto()
    ENUM = auto()


class ReceiverKind(StrEnum):
    """How a method obtains its bound instance."""

    STATIC = auto()  # No receiver, exposed on the type namespace
    BY_VALUE = auto()
    BY_REFERENCE = auto()
    BY_MUTABLE_REFERENCE = auto()


# Receiver keywords of the declaration language
RECEIVER_KEYWORDS: dict[str, ReceiverKind] = {
    "static": ReceiverKind.STATIC,
    "value": ReceiverKind.BY_VALUE,
    "ref": ReceiverKind.BY_REFERENCE,
    "mut": ReceiverKind.BY_MUTABLE_REFERENCE,
}


class Facet(StrEnum):
    """Adapter facets a type can expose."""

    FIELDS = auto()
    METHODS = auto()
    VARIANTS = auto()


# Install order, independent of selection order
FACET_ORDER = (Facet.FIELDS, Facet.METHODS, Facet.VARIANTS)

FACETS_BY_KIND: dict[TypeKind, frozenset[Facet]] = {
    TypeKind.STRUCT: frozenset([Facet.FIELDS, Facet.METHODS]),
    TypeKind.ENUM: frozenset([Facet.METHODS, Facet.VARIANTS]),
}


def to_facet(name: Facet | str, type_name: str = "selection") -> Facet:
    """Resolve a facet name, as written in a `compile` directive."""
    try:
        return Facet(name)
    except ValueError:
        raise BuildError(
            BuildErrorKind.INVALID_SELECTION,
            type_name,
            str(name),
            "unknown facet, expected 'fields', 'methods', or 'variants'",
        ) from None


@dataclass(frozen=True)
class ValueType(DataClassJsonMixin):
    """A convertible value shape.

    `name` is a primitive name, `Self`, or the name of another bound type.
    """

    name: str
    optional: bool = False

    def __str__(self) -> str:
        return f"{self.name}?" if self.optional else self.name

    @classmethod
    def parse(cls, text: str) -> "ValueType":
        """Parse the `int32` / `text?` / `Player` notation."""
        text = text.strip()
        if text.endswith("?"):
            return cls(name=text[:-1].strip(), optional=True)
        return cls(name=text)


@dataclass(frozen=True)
class FieldDescriptor(DataClassJsonMixin):
    """A named, typed struct field or variant payload field."""

    name: str
    value_type: ValueType


@dataclass(frozen=True)
class ParameterDescriptor(DataClassJsonMixin):
    """A named method parameter."""

    name: str
    value_type: ValueType


@dataclass(frozen=True)
class MethodDescriptor(DataClassJsonMixin):
    """A method declared against a bindable type.

    `return_type` is None for methods returning nothing.
    """

    name: str
    receiver: ReceiverKind
    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type: ValueType | None = None

    @property
    def is_static(self) -> bool:
        return self.receiver == ReceiverKind.STATIC


@dataclass(frozen=True)
class VariantDescriptor(DataClassJsonMixin):
    """An enum variant. Unit variants have no payload fields."""

    name: str
    payload_fields: tuple[FieldDescriptor, ...] = ()

    @property
    def is_unit(self) -> bool:
        return not self.payload_fields


@dataclass(frozen=True)
class TypeDescriptor(DataClassJsonMixin):
    """Structural description of one bindable native type."""

    name: str
    kind: TypeKind
    fields: tuple[FieldDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    variants: tuple[VariantDescriptor, ...] = ()


@dataclass(frozen=True)
class ExposureSelection(DataClassJsonMixin):
    """Facets to install for one type."""

    facets: frozenset[Facet]

    @classmethod
    def of(cls, *facets: Facet | str) -> "ExposureSelection":
        return cls(facets=frozenset(to_facet(f) for f in facets))

    def __contains__(self, facet: object) -> bool:
        return facet in self.facets

    def ordered(self) -> list[Facet]:
        """Selected facets in install order."""
        return [f for f in FACET_ORDER if f in self.facets]


def is_primitive(t: ValueType) -> bool:
    """Check if a value type is a primitive shape."""
    return t.name in PRIMITIVE_TYPES


def is_integer(t: ValueType) -> bool:
    return t.name in INTEGER_RANGES


def is_float(t: ValueType) -> bool:
    return t.name in FLOAT_TYPES


def resolve_self(t: ValueType | None, owner: str) -> ValueType | None:
    """Replace `Self` with the owning type's name."""
    if t is None or t.name != SELF_TYPE:
        return t
    return ValueType(name=owner, optional=t.optional)


@dataclass(frozen=True)
class Bindings(DataClassJsonMixin):
    """Every type declared in one session, with the selections to compile."""

    types: tuple[TypeDescriptor, ...]
    selections: dict[str, ExposureSelection]

    def get(self, name: str) -> TypeDescriptor:
        for descriptor in self.types:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def compiled(self) -> list[tuple[TypeDescriptor, ExposureSelection]]:
        """Compiled types with their selections, in declaration order."""
        return [(t, self.selections[t.name]) for t in self.types if t.name in self.selections]
