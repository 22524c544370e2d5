"""Tests for the binding declaration parser."""

import pytest

from scriptbind.generator import BuildError, BuildErrorKind, parse
from scriptbind.generator.types import Facet, ReceiverKind, TypeKind, ValueType


def describe_parse_structure():
    def parses_simple_structure(expect):
        bindings = parse(
            """
            structure Player {
                name: text
                hp: int32
            }
        """
        )
        expect(len(bindings.types)) == 1
        player = bindings.types[0]
        expect(player.name) == "Player"
        expect(player.kind) == TypeKind.STRUCT
        expect([f.name for f in player.fields]) == ["name", "hp"]
        expect(player.fields[1].value_type) == ValueType("int32")

    def parses_optional_types(expect):
        bindings = parse("structure Badge { title: text? }")
        expect(bindings.types[0].fields[0].value_type) == ValueType("text", optional=True)

    def accepts_separators_and_comments(expect):
        bindings = parse(
            """
            # position on the map
            structure Point { x: float32, y: float32; z: float64 }  # trailing
        """
        )
        expect(len(bindings.types[0].fields)) == 3

    def parses_nested_type_references(expect):
        bindings = parse(
            """
            enumeration Status { Idle }
            structure Player { status: Status }
        """
        )
        expect(bindings.get("Player").fields[0].value_type.name) == "Status"

    def allows_keywords_as_member_names(expect):
        bindings = parse("structure Slot { value: int8  ref: bool }")
        expect([f.name for f in bindings.types[0].fields]) == ["value", "ref"]


def describe_parse_enumeration():
    def parses_unit_and_data_variants(expect):
        bindings = parse(
            """
            enumeration Command {
                Stop
                Move(steps: int32, running: bool)
                Wait()
            }
        """
        )
        command = bindings.types[0]
        expect(command.kind) == TypeKind.ENUM
        expect([v.name for v in command.variants]) == ["Stop", "Move", "Wait"]
        expect(command.variants[0].is_unit) == True
        expect([f.name for f in command.variants[1].payload_fields]) == ["steps", "running"]
        expect(command.variants[2].is_unit) == True


def describe_parse_implementation():
    def parses_explicit_receivers(expect):
        bindings = parse(
            """
            structure Player { hp: int32 }
            implementation Player {
                static new(name: text) -> Self
                value renamed(name: text) -> Self
                ref is_alive() -> bool
                mut take_damage(amount: int32)
            }
        """
        )
        methods = bindings.types[0].methods
        expect([m.receiver for m in methods]) == [
            ReceiverKind.STATIC,
            ReceiverKind.BY_VALUE,
            ReceiverKind.BY_REFERENCE,
            ReceiverKind.BY_MUTABLE_REFERENCE,
        ]
        expect(methods[0].return_type) == ValueType("Self")
        expect(methods[2].parameters) == ()
        expect(methods[3].return_type) == None
        expect(methods[3].parameters[0].value_type) == ValueType("int32")

    def parses_consecutive_methods_with_return_types(expect):
        bindings = parse(
            """
            structure Player { hp: int32  title: text? }
            implementation Player {
                ref hp_of() -> int32
                ref alive() -> bool
                ref title_of() -> text?
                mut heal(amount: int32)
                static new(name: text) -> Self; value copy() -> Self
            }
        """
        )
        methods = bindings.types[0].methods
        expect([m.name for m in methods]) == ["hp_of", "alive", "title_of", "heal", "new", "copy"]
        expect(methods[1].return_type) == ValueType("bool")
        expect(methods[2].return_type) == ValueType("text", optional=True)
        expect(methods[4].receiver) == ReceiverKind.STATIC

    def merges_implementation_blocks(expect):
        bindings = parse(
            """
            structure Player { hp: int32 }
            implementation Player { ref is_alive() -> bool }
            implementation Player { mut heal(amount: int32) }
        """
        )
        expect([m.name for m in bindings.types[0].methods]) == ["is_alive", "heal"]

    def allows_implementation_before_use_of_other_types(expect):
        bindings = parse(
            """
            structure Player { hp: int32 }
            implementation Player { mut set_status(status: Status) }
            enumeration Status { Idle }
        """
        )
        expect(bindings.get("Player").methods[0].parameters[0].value_type.name) == "Status"


def describe_parse_compile():
    def collects_selections(expect):
        bindings = parse(
            """
            enumeration Status { Idle }
            structure Player { hp: int32 }
            compile Player: methods, fields
            compile Status: variants
        """
        )
        expect(bindings.selections["Player"].ordered()) == [Facet.FIELDS, Facet.METHODS]
        expect(bindings.selections["Status"].ordered()) == [Facet.VARIANTS]

    def keeps_declaration_order_for_compiled_types(expect):
        bindings = parse(
            """
            enumeration Status { Idle }
            structure Player { hp: int32 }
            structure Hidden { x: int8 }
            compile Player: fields
            compile Status: variants
        """
        )
        expect([t.name for t, _ in bindings.compiled()]) == ["Status", "Player"]

    def parses_shared_game_file(expect, bindings):
        expect([t.name for t in bindings.types]) == ["PlayerStatus", "Command", "Player"]
        expect(len(bindings.get("Player").methods)) == 5


def describe_validation():
    def rejects_unknown_facet(expect):
        with pytest.raises(BuildError) as exc:
            parse(
                """
                structure Player { hp: int32 }
                compile Player: fields, helpers
            """
            )
        expect(exc.value.kind) == BuildErrorKind.INVALID_SELECTION
        expect("expected 'fields', 'methods', or 'variants'" in str(exc.value)) == True

    def rejects_variants_on_structure(expect):
        with pytest.raises(BuildError) as exc:
            parse(
                """
                structure Player { hp: int32 }
                compile Player: variants
            """
            )
        expect(exc.value.kind) == BuildErrorKind.INVALID_SELECTION

    def rejects_implementation_of_undeclared_type(expect):
        with pytest.raises(BuildError) as exc:
            parse("implementation Ghost { ref boo() }")
        expect(exc.value.kind) == BuildErrorKind.UNKNOWN_TYPE

    def rejects_compile_of_undeclared_type(expect):
        with pytest.raises(BuildError) as exc:
            parse("compile Ghost: fields")
        expect(exc.value.kind) == BuildErrorKind.UNKNOWN_TYPE

    def rejects_compiling_twice(expect):
        with pytest.raises(BuildError) as exc:
            parse(
                """
                structure Player { hp: int32 }
                compile Player: fields
                compile Player: methods
            """
            )
        expect(exc.value.kind) == BuildErrorKind.DUPLICATE_NAME

    def rejects_duplicate_declarations(expect):
        with pytest.raises(BuildError):
            parse("structure A { x: int8 } enumeration A { B }")

    def rejects_duplicate_methods_across_blocks(expect):
        with pytest.raises(BuildError) as exc:
            parse(
                """
                structure Player { hp: int32 }
                implementation Player { ref is_alive() -> bool }
                implementation Player { ref is_alive() -> bool }
            """
            )
        expect(exc.value.kind) == BuildErrorKind.DUPLICATE_NAME
        expect(exc.value.member) == "is_alive"

    def rejects_unsupported_types(expect):
        with pytest.raises(BuildError) as exc:
            parse(
                """
                structure Player { hp: int32 }
                implementation Player { mut aim(target: Vector3) }
            """
            )
        expect(exc.value.kind) == BuildErrorKind.UNSUPPORTED_TYPE
        expect("parameter 'target'" in str(exc.value)) == True


def describe_parse_errors():
    def rejects_invalid_syntax(expect):
        with pytest.raises(Exception):
            parse("this is not valid syntax")

    def rejects_missing_receiver(expect):
        with pytest.raises(Exception):
            parse(
                """
                structure Player { hp: int32 }
                implementation Player { is_alive() -> bool }
            """
            )

    def rejects_unclosed_brace(expect):
        with pytest.raises(Exception):
            parse(
                """
                structure Broken {
                    x: int32
            """
            )
