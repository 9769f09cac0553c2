# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the mirrorgen compiler workflow."""

from __future__ import annotations

from pathlib import Path

import pytest

from mirrorgen.compiler.build import (
    OUTPUT_SUFFIX,
    CompilerError,
    compile_files,
    compile_source,
    plan_schema,
    plan_source,
)
from mirrorgen.compiler.parser import parse
from mirrorgen.model.mapping import MappingMode
from mirrorgen.workspace.config import MirrorgenConfig

# ###############
# Helpers
# ###############

PEOPLE = """\
@mirror
record Person {
    @persisted name: String
    @persisted friends: List<Person>
}

record Address {
    @persisted city: String
}
"""


def _write(path: Path, content: str) -> None:
    """Write *content* to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ###############
# Planning
# ###############


class TestPlanSource:
    def test_one_plan_per_mirror_request(self) -> None:
        plans = plan_source(PEOPLE)
        assert [(p.record_name, p.mirror_name) for p in plans] == [("Person", "ReadonlyPerson")]

    def test_records_without_mirror_are_not_planned(self) -> None:
        assert plan_source("record Address { @persisted city: String }") == []

    def test_default_mode_applies_to_bare_mirror(self) -> None:
        plans = plan_source(PEOPLE, default_mode=MappingMode.OBSERVABLE)
        assert plans[0].mirror_name == "ObservablePerson"

    def test_explicit_mode_wins_over_default(self) -> None:
        plans = plan_source("@mirror(readonly) record A {}", default_mode=MappingMode.OBSERVABLE)
        assert plans[0].mode is MappingMode.READONLY

    def test_both_modes_on_one_record(self) -> None:
        plans = plan_source("@mirror(observable) @mirror(readonly) record A {}")
        assert [p.mirror_name for p in plans] == ["ObservableA", "ReadonlyA"]

    def test_plans_keep_declaration_order(self) -> None:
        plans = plan_source("@mirror record B {} @mirror record A {}")
        assert [p.record_name for p in plans] == ["B", "A"]

    def test_unrecognized_mode_is_an_error(self) -> None:
        with pytest.raises(CompilerError, match="Unrecognized mapping mode 'obsrvable'") as exc_info:
            plan_source("record A {}\n@mirror(obsrvable) record B {}", source_label="x.mirror")
        assert str(exc_info.value).startswith("x.mirror: Line 2: record 'B'")

    def test_same_mode_twice_is_an_error(self) -> None:
        with pytest.raises(CompilerError, match="mirrored twice in 'readonly' mode"):
            plan_source("@mirror @mirror(readonly) record A {}")

    def test_field_error_names_the_source(self) -> None:
        with pytest.raises(CompilerError) as exc_info:
            plan_source("@mirror record A { @persisted m: Map<String> }", source_label="a.mirror")
        message = str(exc_info.value)
        assert message.startswith("a.mirror: Record 'A', field 'm' (Map<String>)")

    def test_parse_error_becomes_compiler_error(self) -> None:
        with pytest.raises(CompilerError, match="s.mirror: Line 1"):
            plan_source("@mirror enum E {}", source_label="s.mirror")

    def test_lexer_error_becomes_compiler_error(self) -> None:
        with pytest.raises(CompilerError):
            plan_source("record A { x: Int; }")

    def test_failure_in_one_record_fails_the_file(self) -> None:
        with pytest.raises(CompilerError, match="'Bad'"):
            plan_source("@mirror record Good { @persisted a: Int }\n@mirror record Bad { @persisted b: List<> }")

    def test_enum_field_is_an_error_naming_the_field(self) -> None:
        source = "enum Color { red green }\n@mirror record Car { @persisted paint: Color }"
        with pytest.raises(CompilerError) as exc_info:
            plan_source(source, source_label="cars.mirror")
        message = str(exc_info.value)
        assert message.startswith("cars.mirror: Record 'Car', field 'paint' (Color)")
        assert "Enum 'Color' cannot be mirrored" in message

    def test_enum_declared_later_is_still_rejected(self) -> None:
        with pytest.raises(CompilerError, match="Enum 'Color'"):
            plan_source("@mirror record Car { @persisted paints: List<Color?> }\nenum Color { red }")

    def test_unmirrored_record_may_hold_enums(self) -> None:
        plans = plan_source("enum Color { red }\nrecord Car { @persisted paint: Color }")
        assert plans == []


class TestStrictReferences:
    def test_references_are_trusted_by_default(self) -> None:
        plans = plan_source("@mirror record A { @persisted b: B }")
        assert plans[0].fields[0].mirror_field_decl == "b: ReadonlyB"

    def test_reference_to_unmirrored_record(self) -> None:
        with pytest.raises(CompilerError, match="no mirror 'ReadonlyB'"):
            plan_source("@mirror record A { @persisted b: B }\nrecord B {}", strict_references=True)

    def test_later_declaration_is_visible(self) -> None:
        plans = plan_source(
            "@mirror record A { @persisted b: List<B> }\n@mirror record B {}",
            strict_references=True,
        )
        assert len(plans) == 2

    def test_self_reference(self) -> None:
        assert len(plan_source(PEOPLE, strict_references=True)) == 1

    def test_mode_must_match(self) -> None:
        source = "@mirror(observable) record A { @persisted b: B }\n@mirror(readonly) record B {}"
        with pytest.raises(CompilerError, match="ObservableB"):
            plan_source(source, strict_references=True)

    def test_plan_schema_accepts_parsed_schema(self) -> None:
        plans = plan_schema(parse(PEOPLE), strict_references=True)
        assert plans[0].fields[1].mirror_field_decl == "friends: tuple[ReadonlyPerson, ...]"


# ###############
# Module Generation
# ###############


class TestCompileSource:
    def test_generated_module_contains_mirror(self) -> None:
        text = compile_source(PEOPLE, persistent_module="people", source_label="people.mirror")
        assert text.startswith("# Generated by mirrorgen from people.mirror. Do not edit.\n")
        assert "from people import Person\n" in text
        assert "class ReadonlyPerson:" in text
        assert "ReadonlyAddress" not in text

    def test_generated_module_compiles(self) -> None:
        text = compile_source("@mirror(observable) @mirror record A { @persisted xs: Map<String, List<A>>? }")
        compile(text, "a_mirrors.py", "exec")


# ###############
# File Compilation
# ###############


class TestCompileFiles:
    def test_writes_one_module_per_schema(self, tmp_path: Path) -> None:
        schema = tmp_path / "src" / "people.mirror"
        _write(schema, PEOPLE)
        build = tmp_path / "generated"
        outputs = compile_files([schema], build, MirrorgenConfig())
        assert outputs == {schema: build / f"people{OUTPUT_SUFFIX}"}
        assert (build / "people_mirrors.py").exists()

    def test_persistent_module_defaults_to_stem(self, tmp_path: Path) -> None:
        schema = tmp_path / "people.mirror"
        _write(schema, PEOPLE)
        outputs = compile_files([schema], tmp_path / "out", MirrorgenConfig())
        assert "from people import Person\n" in outputs[schema].read_text(encoding="utf-8")

    def test_configured_persistent_module(self, tmp_path: Path) -> None:
        schema = tmp_path / "people.mirror"
        _write(schema, PEOPLE)
        config = MirrorgenConfig(persistent_module="app.models")
        outputs = compile_files([schema], tmp_path / "out", config)
        assert "from app.models import Person\n" in outputs[schema].read_text(encoding="utf-8")

    def test_configured_default_mode(self, tmp_path: Path) -> None:
        schema = tmp_path / "people.mirror"
        _write(schema, PEOPLE)
        config = MirrorgenConfig(default_mode=MappingMode.OBSERVABLE)
        text = compile_files([schema], tmp_path / "out", config)[schema].read_text(encoding="utf-8")
        assert "class ObservablePerson:" in text
        assert "from mirrorgen.runtime import observable\n" in text

    def test_configured_strict_references(self, tmp_path: Path) -> None:
        schema = tmp_path / "a.mirror"
        _write(schema, "@mirror record A { @persisted b: B }")
        with pytest.raises(CompilerError, match="a.mirror"):
            compile_files([schema], tmp_path / "out", MirrorgenConfig(strict_references=True))

    def test_nothing_written_when_a_file_fails(self, tmp_path: Path) -> None:
        good = tmp_path / "good.mirror"
        bad = tmp_path / "bad.mirror"
        _write(good, PEOPLE)
        _write(bad, "@mirror(sometimes) record A {}")
        build = tmp_path / "out"
        with pytest.raises(CompilerError):
            compile_files([good, bad], build, MirrorgenConfig())
        assert not build.exists()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CompilerError, match="Cannot read schema file"):
            compile_files([tmp_path / "missing.mirror"], tmp_path / "out", MirrorgenConfig())

    def test_colliding_outputs(self, tmp_path: Path) -> None:
        first = tmp_path / "a" / "people.mirror"
        second = tmp_path / "b" / "people.mirror"
        _write(first, PEOPLE)
        _write(second, PEOPLE)
        with pytest.raises(CompilerError, match="already generated from another file"):
            compile_files([first, second], tmp_path / "out", MirrorgenConfig())

    @pytest.mark.parametrize("stem", ["my-models", "2024_models", "class"])
    def test_stem_that_is_not_a_module_name(self, tmp_path: Path, stem: str) -> None:
        schema = tmp_path / f"{stem}.mirror"
        _write(schema, PEOPLE)
        build = tmp_path / "out"
        with pytest.raises(CompilerError, match=f"persistent module name '{stem}' is not a valid Python module name"):
            compile_files([schema], build, MirrorgenConfig())
        assert not build.exists()

    def test_configured_module_overrides_an_invalid_stem(self, tmp_path: Path) -> None:
        schema = tmp_path / "my-models.mirror"
        _write(schema, PEOPLE)
        outputs = compile_files([schema], tmp_path / "out", MirrorgenConfig(persistent_module="app.models"))
        assert "from app.models import Person\n" in outputs[schema].read_text(encoding="utf-8")

    @pytest.mark.parametrize("module", ["app..models", "app.import", ".models"])
    def test_invalid_configured_module(self, tmp_path: Path, module: str) -> None:
        schema = tmp_path / "people.mirror"
        _write(schema, PEOPLE)
        with pytest.raises(CompilerError, match="not a valid Python module name"):
            compile_files([schema], tmp_path / "out", MirrorgenConfig(persistent_module=module))
