"""Tests for the descriptor builder and declaration rules."""

import pytest

from scriptbind.generator import BuildError, BuildErrorKind, TypeBuilder, validate_selection
from scriptbind.generator.types import (
    ExposureSelection,
    Facet,
    ReceiverKind,
    TypeKind,
    ValueType,
    resolve_self,
)


def player_builder():
    return (
        TypeBuilder.structure("Player")
        .field("name", "text")
        .field("hp", "int32")
        .method("new", receiver="static", params=[("name", "text")], returns="Self")
        .method(
            "take_damage",
            receiver=ReceiverKind.BY_MUTABLE_REFERENCE,
            params=[("amount", "int32")],
        )
    )


def describe_value_type():
    def parses_plain_and_optional_names(expect):
        expect(ValueType.parse("int32")) == ValueType("int32")
        expect(ValueType.parse("text?")) == ValueType("text", optional=True)
        expect(str(ValueType("text", optional=True))) == "text?"

    def resolves_self_to_owner(expect):
        expect(resolve_self(ValueType("Self"), "Player")) == ValueType("Player")
        expect(resolve_self(ValueType("Self", optional=True), "Player").optional) == True
        expect(resolve_self(ValueType("int8"), "Player")) == ValueType("int8")
        expect(resolve_self(None, "Player")) == None


def describe_exposure_selection():
    def orders_facets_for_install(expect):
        selection = ExposureSelection.of("variants", "methods", "fields")
        expect(selection.ordered()) == [Facet.FIELDS, Facet.METHODS, Facet.VARIANTS]

    def supports_membership(expect):
        selection = ExposureSelection.of(Facet.METHODS)
        expect(Facet.METHODS in selection) == True
        expect(Facet.FIELDS in selection) == False

    def rejects_unknown_facet_names(expect):
        with pytest.raises(BuildError) as exc:
            ExposureSelection.of("fields", "helpers")
        expect(exc.value.kind) == BuildErrorKind.INVALID_SELECTION
        expect(exc.value.member) == "helpers"
        expect("expected 'fields', 'methods', or 'variants'" in str(exc.value)) == True


def describe_type_builder():
    def builds_struct_descriptor(expect):
        player = player_builder().build()
        expect(player.kind) == TypeKind.STRUCT
        expect([f.name for f in player.fields]) == ["name", "hp"]
        expect(player.fields[1].value_type) == ValueType("int32")
        expect(player.methods[0].is_static) == True
        expect(player.methods[0].return_type) == ValueType("Self")
        expect(player.methods[1].receiver) == ReceiverKind.BY_MUTABLE_REFERENCE
        expect(player.methods[1].parameters[0].name) == "amount"
        expect(player.methods[1].return_type) == None

    def builds_enum_descriptor(expect):
        status = (
            TypeBuilder.enumeration("Status")
            .variant("Idle")
            .variant("Stunned", ("turns", "uint8"))
            .build()
        )
        expect(status.kind) == TypeKind.ENUM
        expect(status.variants[0].is_unit) == True
        expect(status.variants[1].is_unit) == False
        expect(status.variants[1].payload_fields[0].value_type) == ValueType("uint8")

    def descriptors_are_immutable(expect):
        player = player_builder().build()
        with pytest.raises(AttributeError):
            player.name = "Other"
        expect(isinstance(player.fields, tuple)) == True

    def requires_a_known_receiver_kind(expect):
        with pytest.raises(ValueError):
            TypeBuilder.structure("Player").method("heal", receiver="self")

    def accepts_references_to_known_types(expect):
        player = player_builder().field("status", "Status").build(known_types=["Status"])
        expect(player.fields[-1].value_type.name) == "Status"


def describe_validation():
    def rejects_duplicate_fields(expect):
        with pytest.raises(BuildError) as exc:
            player_builder().field("hp", "int64").build()
        expect(exc.value.kind) == BuildErrorKind.DUPLICATE_NAME
        expect(exc.value.type_name) == "Player"
        expect(exc.value.member) == "hp"

    def rejects_duplicate_methods(expect):
        with pytest.raises(BuildError) as exc:
            player_builder().method("new", receiver="static").build()
        expect(exc.value.kind) == BuildErrorKind.DUPLICATE_NAME

    def rejects_duplicate_variants(expect):
        with pytest.raises(BuildError) as exc:
            TypeBuilder.enumeration("Status").variant("Idle").variant("Idle").build()
        expect(exc.value.kind) == BuildErrorKind.DUPLICATE_NAME

    def names_unsupported_parameter(expect):
        with pytest.raises(BuildError) as exc:
            player_builder().method(
                "aim", receiver="ref", params=[("target", "Vector3")]
            ).build()
        expect(exc.value.kind) == BuildErrorKind.UNSUPPORTED_TYPE
        expect(exc.value.member) == "aim"
        expect("parameter 'target'" in str(exc.value)) == True

    def names_unsupported_return_type(expect):
        with pytest.raises(BuildError) as exc:
            player_builder().method("position", receiver="ref", returns="Vector3").build()
        expect("return type" in str(exc.value)) == True

    def names_unsupported_field_type(expect):
        with pytest.raises(BuildError) as exc:
            player_builder().field("weapon", "Sword").build()
        expect(exc.value.kind) == BuildErrorKind.UNSUPPORTED_TYPE
        expect(exc.value.member) == "weapon"

    def rejects_fields_on_enums(expect):
        with pytest.raises(BuildError):
            TypeBuilder.enumeration("Status").field("x", "int8").build()

    def rejects_variants_on_structs(expect):
        with pytest.raises(BuildError):
            TypeBuilder.structure("Point").variant("Origin").build()

    def rejects_facets_the_kind_cannot_expose(expect):
        player = player_builder().build()
        with pytest.raises(BuildError) as exc:
            validate_selection(player, ExposureSelection.of("fields", "variants"))
        expect(exc.value.kind) == BuildErrorKind.INVALID_SELECTION

        status = TypeBuilder.enumeration("Status").variant("Idle").build()
        with pytest.raises(BuildError):
            validate_selection(status, ExposureSelection.of("fields"))
