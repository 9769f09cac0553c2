# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the .mirror schema parser."""

import pytest

from mirrorgen.compiler.parser import NotARecordDeclarationError, ParseError, parse
from mirrorgen.model.entities import RecordDecl, SchemaFile
from mirrorgen.model.types import FieldDescriptor
from mirrorgen.parser.lexer import LexerError
# ###############
# Test Helpers
# ###############


def _single_record(source: str) -> RecordDecl:
    """Parse *source* and return its only record."""
    schema = parse(source)
    assert len(schema.records) == 1
    return schema.records[0]


# ###############
# Empty Input
# ###############


class TestEmptyInput:
    def test_empty_source(self) -> None:
        assert parse("") == SchemaFile()

    def test_comments_only(self) -> None:
        schema = parse("// nothing here\n/* still nothing */")
        assert schema.records == []
        assert schema.enums == []


# ###############
# Records
# ###############


class TestRecords:
    def test_record_without_mirror(self) -> None:
        record = _single_record("record Person { @persisted name: String }")
        assert record.name == "Person"
        assert record.mirrors == []

    def test_persisted_and_plain_fields(self) -> None:
        record = _single_record(
            """
            record Person {
                @persisted name: String
                cachedScore: Double
            }
            """
        )
        assert record.fields == [
            FieldDescriptor(name="name", declared_type="String", persisted=True),
            FieldDescriptor(name="cachedScore", declared_type="Double", persisted=False),
        ]
        assert [f.name for f in record.persisted_fields] == ["name"]

    def test_field_order_is_preserved(self) -> None:
        record = _single_record("record R { @persisted b: Int @persisted a: Int @persisted c: Int }")
        assert [f.name for f in record.fields] == ["b", "a", "c"]

    def test_keyword_as_field_name(self) -> None:
        record = _single_record("record R { @persisted record: String }")
        assert record.fields[0].name == "record"

    def test_empty_record(self) -> None:
        assert _single_record("record Marker {}").fields == []

    def test_records_keep_declaration_order(self) -> None:
        schema = parse("record B {} record A {}")
        assert [r.name for r in schema.records] == ["B", "A"]


# ###############
# Declared Types
# ###############


class TestDeclaredTypes:
    @pytest.mark.parametrize(
        ("written", "captured"),
        [
            ("String", "String"),
            ("String?", "String?"),
            ("List<Person>", "List<Person>"),
            ("List< Person? >", "List<Person?>"),
            ("Map<String,String>", "Map<String, String>"),
            ("Map<String , List<Int>>?", "Map<String, List<Int>>?"),
            ("Optional<Person>", "Optional<Person>"),
        ],
    )
    def test_type_text_is_normalized(self, written: str, captured: str) -> None:
        record = _single_record(f"record R {{ @persisted f: {written} }}")
        assert record.fields[0].declared_type == captured

    def test_invalid_type_text_is_left_to_the_compiler(self) -> None:
        record = _single_record("record R { @persisted f: Map<String> }")
        assert record.fields[0].declared_type == "Map<String>"

    def test_unterminated_type_arguments(self) -> None:
        with pytest.raises(ParseError, match="Unterminated type arguments"):
            parse("record R { @persisted f: List<String }")


# ###############
# Mirror Attributes
# ###############


class TestMirrorAttributes:
    def test_bare_mirror(self) -> None:
        record = _single_record("@mirror record Person {}")
        assert len(record.mirrors) == 1
        assert record.mirrors[0].mode is None

    @pytest.mark.parametrize(
        ("argument", "mode"),
        [
            ("readonly", "readonly"),
            ("observable", "observable"),
            ('"observable"', "observable"),
            ("'readonly'", "readonly"),
            ("bogus", "bogus"),
        ],
    )
    def test_mode_argument_is_kept_as_text(self, argument: str, mode: str) -> None:
        record = _single_record(f"@mirror({argument}) record Person {{}}")
        assert record.mirrors[0].mode == mode

    def test_several_mirrors_on_one_record(self) -> None:
        record = _single_record("@mirror(readonly)\n@mirror(observable)\nrecord Person {}")
        assert [m.mode for m in record.mirrors] == ["readonly", "observable"]
        assert [m.line for m in record.mirrors] == [1, 2]

    def test_mirror_on_enum_is_rejected(self) -> None:
        with pytest.raises(NotARecordDeclarationError) as exc_info:
            parse("@mirror\nenum Color { red }")
        assert exc_info.value.line == 2
        assert "'enum'" in str(exc_info.value)

    def test_mirror_at_end_of_file_is_rejected(self) -> None:
        with pytest.raises(NotARecordDeclarationError, match="end of file"):
            parse("record A {}\n@mirror")

    def test_not_a_record_is_a_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse("@mirror enum Color {}")

    def test_unknown_declaration_attribute(self) -> None:
        with pytest.raises(ParseError, match="Unknown declaration attribute '@entity'"):
            parse("@entity record Person {}")

    def test_unclosed_mode_argument(self) -> None:
        with pytest.raises(ParseError):
            parse("@mirror(readonly record Person {}")


# ###############
# Enums
# ###############


class TestEnums:
    def test_enum_values(self) -> None:
        schema = parse("enum Color { red green blue }")
        assert schema.enums[0].name == "Color"
        assert schema.enums[0].values == ["red", "green", "blue"]

    def test_enum_and_record_together(self) -> None:
        schema = parse("enum Color { red }\n@mirror record Car { @persisted color: Color }")
        assert [e.name for e in schema.enums] == ["Color"]
        assert schema.records[0].fields[0].declared_type == "Color"


# ###############
# Errors
# ###############


class TestErrors:
    def test_unknown_field_attribute(self) -> None:
        with pytest.raises(ParseError, match="Unknown field attribute '@transient'"):
            parse("record R { @transient f: Int }")

    def test_duplicate_field(self) -> None:
        with pytest.raises(ParseError, match="Duplicate field 'name'") as exc_info:
            parse("record R {\n  name: String\n  name: Int\n}")
        assert exc_info.value.line == 3

    def test_duplicate_declaration(self) -> None:
        with pytest.raises(ParseError, match="Duplicate declaration of 'Person'"):
            parse("record Person {} enum Person { a }")

    @pytest.mark.parametrize("name", ["String", "List", "Map", "UUID"])
    def test_builtin_names_cannot_be_redeclared(self, name: str) -> None:
        with pytest.raises(ParseError, match="built-in type name"):
            parse(f"record {name} {{}}")

    @pytest.mark.parametrize("name", ["from", "class", "None", "lambda", "import"])
    def test_python_keyword_field_name(self, name: str) -> None:
        with pytest.raises(ParseError, match=f"Field name '{name}' is a Python keyword") as exc_info:
            parse(f"record R {{\n    @persisted {name}: String\n}}")
        assert (exc_info.value.line, exc_info.value.column) == (2, 16)

    def test_soft_keywords_are_valid_field_names(self) -> None:
        record = _single_record("record R { @persisted match: String @persisted type: Int }")
        assert [f.name for f in record.fields] == ["match", "type"]

    @pytest.mark.parametrize("name", ["from_persisted", "build_persisted_object"])
    def test_generated_method_name_as_field_name(self, name: str) -> None:
        with pytest.raises(ParseError, match="clashes with a generated mirror method"):
            parse(f"record R {{ {name}: String }}")

    @pytest.mark.parametrize("declaration", ["record class {}", "enum None { a }", "record def {}"])
    def test_python_keyword_type_name(self, declaration: str) -> None:
        with pytest.raises(ParseError, match="is a Python keyword and cannot name a type"):
            parse(declaration)

    @pytest.mark.parametrize("name", ["dataclass", "observable", "immutabledict", "datetime"])
    def test_generated_module_import_as_type_name(self, name: str) -> None:
        with pytest.raises(ParseError, match="imported by generated modules"):
            parse(f"@mirror record {name} {{}}")

    def test_missing_colon(self) -> None:
        with pytest.raises(ParseError, match="Expected"):
            parse("record R { name String }")

    def test_unexpected_top_level_token(self) -> None:
        with pytest.raises(ParseError, match="at top level"):
            parse("Person {}")

    def test_missing_closing_brace(self) -> None:
        with pytest.raises(ParseError):
            parse("record R { name: String")

    def test_lexer_errors_propagate(self) -> None:
        with pytest.raises(LexerError):
            parse("record R { name: String; }")

    def test_error_location(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("record R {\n    name: }")
        assert (exc_info.value.line, exc_info.value.column) == (2, 11)
