"""Binding declaration parser using Lark."""

import logging
import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.visitors import Transformer

from .builder import validate_selection, validate_type
from .errors import BuildError, BuildErrorKind
from .types import (
    RECEIVER_KEYWORDS,
    Bindings,
    ExposureSelection,
    FieldDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    ReceiverKind,
    TypeDescriptor,
    TypeKind,
    ValueType,
    VariantDescriptor,
    to_facet,
)

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None


@dataclass
class _Name:
    value: str


@dataclass
class _Facet:
    value: str


@dataclass
class _Declaration:
    name: str
    kind: TypeKind
    fields: list[FieldDescriptor]
    variants: list[VariantDescriptor]


@dataclass
class _Implementation:
    name: str
    methods: list[MethodDescriptor]


@dataclass
class _Compile:
    name: str
    facets: list[str]


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


class TreeTransformer(Transformer):
    """Transform parse tree into descriptor pieces."""

    def start(self, args: list[Any]) -> list[Any]:
        return args

    def structure(self, args: list[Any]) -> _Declaration:
        return _Declaration(
            name=_find_one(args, _Name),
            kind=TypeKind.STRUCT,
            fields=_filter(args, FieldDescriptor),
            variants=[],
        )

    def enumeration(self, args: list[Any]) -> _Declaration:
        return _Declaration(
            name=_find_one(args, _Name),
            kind=TypeKind.ENUM,
            fields=[],
            variants=_filter(args, VariantDescriptor),
        )

    def implementation(self, args: list[Any]) -> _Implementation:
        return _Implementation(name=_find_one(args, _Name), methods=_filter(args, MethodDescriptor))

    def compile(self, args: list[Any]) -> _Compile:
        return _Compile(name=_find_one(args, _Name), facets=[f.value for f in _filter(args, _Facet)])

    def field(self, args: list[Any]) -> FieldDescriptor:
        return FieldDescriptor(name=_find_one(args, _Name), value_type=_find_one(args, ValueType))

    def payload(self, args: list[Any]) -> FieldDescriptor:
        return self.field(args)

    def param(self, args: list[Any]) -> ParameterDescriptor:
        return ParameterDescriptor(
            name=_find_one(args, _Name), value_type=_find_one(args, ValueType)
        )

    def variant(self, args: list[Any]) -> VariantDescriptor:
        return VariantDescriptor(
            name=_find_one(args, _Name), payload_fields=tuple(_filter(args, FieldDescriptor))
        )

    def method(self, args: list[Any]) -> MethodDescriptor:
        return MethodDescriptor(
            name=_find_one(args, _Name),
            receiver=_filter(args, ReceiverKind)[0],
            parameters=tuple(_filter(args, ParameterDescriptor)),
            return_type=_find_one(args, ValueType),
        )

    def receiver(self, args: list[Any]) -> ReceiverKind:
        return RECEIVER_KEYWORDS[str(args[0])]

    def type(self, args: list[Any]) -> ValueType:
        return ValueType(name=str(args[0]), optional=len(args) > 1)

    def return_type(self, args: list[Any]) -> ValueType:
        return self.type(args)

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))

    def facet(self, args: list[Any]) -> _Facet:
        return _Facet(value=str(args[0]))


def assemble(items: list[Any]) -> Bindings:
    """Merge declarations, implementations and compile directives."""
    declarations: dict[str, _Declaration] = {}
    methods: dict[str, list[MethodDescriptor]] = {}
    selections: dict[str, ExposureSelection] = {}

    for item in _filter(items, _Declaration):
        if item.name in declarations:
            raise BuildError(
                BuildErrorKind.DUPLICATE_NAME, item.name, None, "type declared more than once"
            )
        declarations[item.name] = item
        methods[item.name] = []

    for impl in _filter(items, _Implementation):
        if impl.name not in declarations:
            raise BuildError(
                BuildErrorKind.UNKNOWN_TYPE,
                impl.name,
                None,
                "implementation for a type that was never declared",
            )
        methods[impl.name].extend(impl.methods)

    types = tuple(
        TypeDescriptor(
            name=d.name,
            kind=d.kind,
            fields=tuple(d.fields),
            methods=tuple(methods[d.name]),
            variants=tuple(d.variants),
        )
        for d in declarations.values()
    )
    for descriptor in types:
        validate_type(descriptor, declarations)

    by_name = {t.name: t for t in types}
    for directive in _filter(items, _Compile):
        if directive.name not in by_name:
            raise BuildError(
                BuildErrorKind.UNKNOWN_TYPE,
                directive.name,
                None,
                "compile directive for a type that was never declared",
            )
        if directive.name in selections:
            raise BuildError(
                BuildErrorKind.DUPLICATE_NAME, directive.name, None, "type compiled more than once"
            )
        selection = ExposureSelection(
            facets=frozenset(to_facet(f, directive.name) for f in directive.facets)
        )
        validate_selection(by_name[directive.name], selection)
        selections[directive.name] = selection

    return Bindings(types=types, selections=selections)


def parse(text: str) -> Bindings:
    """Parse a binding declaration file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/bindings.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr")

    tree = _g_parser.parse(text)
    items = TreeTransformer().transform(tree)

    bindings = assemble(items)
    logger.debug(
        "Parsed %d types, %d compiled", len(bindings.types), len(bindings.selections)
    )
    return bindings


def parse_file(path: str | os.PathLike[str]) -> Bindings:
    """Parse a binding declaration file from disk."""
    with open(path, encoding="utf-8") as f:
        return parse(f.read())
