"""Tests for the C header writer."""

from __future__ import annotations

import logging

import pytest

from abiheader.cdecl import (
    CEnum,
    CEnumValue,
    CField,
    CFunction,
    CHeader,
    CParameter,
    CPointer,
    CStruct,
    CType,
    CTypedef,
)
from abiheader.writers.c import (
    CHeaderWriter,
    collect_early_structs,
    collect_opaque_types,
    enum_to_c,
    function_to_c,
    guard_token,
    header_to_c,
    required_includes,
    struct_to_c,
    type_to_c,
    typedef_to_c,
)

EMPTY_HEADER = """\
#ifndef abiheader_gen_empty_h
#define abiheader_gen_empty_h

#ifdef __cplusplus
extern "C" {
#endif

#ifdef __cplusplus
}
#endif

#endif
"""


class TestTypeToC:
    def test_base_type(self) -> None:
        assert type_to_c(CType("int32_t")) == "int32_t"

    def test_qualified_base(self) -> None:
        assert type_to_c(CType("bool", ("const",))) == "const bool"

    def test_pointer_depth(self) -> None:
        assert type_to_c(CPointer(CPointer(CPointer(CPointer(CType("int32_t")))))) == "int32_t****"

    def test_const_pointer_level(self) -> None:
        assert type_to_c(CPointer(CPointer(CType("int32_t"), ("const",)))) == "int32_t* const*"

    def test_matches_str(self) -> None:
        t = CPointer(CPointer(CType("bool", ("const",))), ("const",))
        assert type_to_c(t) == str(t) == "const bool** const"

    def test_rejects_source_types(self) -> None:
        with pytest.raises(TypeError, match="not a C type expression"):
            type_to_c("int")  # type: ignore[arg-type]


class TestTypedef:
    def test_primitive(self) -> None:
        assert typedef_to_c(CTypedef("Int64", CType("int64_t"))) == "typedef int64_t Int64;"

    def test_void(self) -> None:
        assert typedef_to_c(CTypedef("MyVoid", CType("void"))) == "typedef void MyVoid;"

    def test_const_pointer(self) -> None:
        decl = CTypedef("LogicArray", CPointer(CType("bool", ("const",))))
        assert typedef_to_c(decl) == "typedef const bool* LogicArray;"

    def test_mutable_pointer(self) -> None:
        assert typedef_to_c(CTypedef("FloatArray", CPointer(CType("double")))) == "typedef double* FloatArray;"


class TestEnum:
    def test_implicit_values(self) -> None:
        decl = CEnum("Colours", [CEnumValue("Red"), CEnumValue("Orange"), CEnumValue("Yellow")])
        assert enum_to_c(decl) == ("typedef enum Colours {\n    Red,\n    Orange,\n    Yellow,\n} Colours;")

    def test_explicit_then_implicit(self) -> None:
        decl = CEnum("TypesOfLabrador", [CEnumValue("Stupid", -8), CEnumValue("Braindead")])
        out = enum_to_c(decl)
        assert "    Stupid = -8,\n" in out
        assert "    Braindead,\n" in out
        assert "Braindead =" not in out

    def test_explicit_zero_is_printed(self) -> None:
        out = enum_to_c(CEnum("E", [CEnumValue("A", 0)]))
        assert "    A = 0," in out


class TestStruct:
    def test_field_order(self) -> None:
        decl = CStruct(
            "Student",
            [
                CField("id", CType("int32_t")),
                CField("roll", CType("int32_t")),
                CField("score", CType("double")),
            ],
        )
        assert struct_to_c(decl) == (
            "typedef struct Student {\n    int32_t id;\n    int32_t roll;\n    double score;\n} Student;"
        )

    def test_pointer_field(self) -> None:
        decl = CStruct("Node", [CField("next", CPointer(CType("Node")))])
        assert "    Node* next;" in struct_to_c(decl)


class TestFunction:
    def test_prototype(self) -> None:
        decl = CFunction(
            "add_i64",
            CType("int64_t"),
            [CParameter("lhs", CType("int64_t")), CParameter("rhs", CType("int64_t"))],
        )
        assert function_to_c(decl) == "int64_t add_i64(int64_t lhs, int64_t rhs);"

    def test_no_parameters(self) -> None:
        assert function_to_c(CFunction("init", CType("void"))) == "void init(void);"

    def test_pointer_return(self) -> None:
        decl = CFunction("name", CPointer(CType("uint8_t", ("const",))))
        assert function_to_c(decl) == "const uint8_t* name(void);"


class TestGuard:
    def test_from_file_name(self) -> None:
        assert guard_token("actual.h") == "abiheader_gen_actual_h"

    def test_directories_ignored(self) -> None:
        assert guard_token("build/include/actual.h") == "abiheader_gen_actual_h"

    def test_sanitized(self) -> None:
        assert guard_token("my-lib.v2.h", "x") == "x_my_lib_v2_h"

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ABIHEADER_GUARD_PREFIX", "MYLIB")
        assert guard_token("api.h") == "MYLIB_api_h"

    def test_invalid_env_prefix_ignored(self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
        monkeypatch.setenv("ABIHEADER_GUARD_PREFIX", "1 bad")
        with caplog.at_level(logging.WARNING, logger="abiheader.writers.c"):
            assert guard_token("api.h") == "abiheader_gen_api_h"
        assert "ABIHEADER_GUARD_PREFIX" in caplog.text

    def test_explicit_prefix_beats_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ABIHEADER_GUARD_PREFIX", "MYLIB")
        assert guard_token("api.h", "other") == "other_api_h"


class TestIncludes:
    def test_none_needed(self) -> None:
        header = CHeader("t.h", typedefs=[CTypedef("Real", CType("double"))])
        assert required_includes(header) == []

    def test_stdint_only(self) -> None:
        header = CHeader("t.h", functions=[CFunction("f", CType("void"), [CParameter("x", CType("uintptr_t"))])])
        assert required_includes(header) == ["stdint.h"]

    def test_stdbool_only(self) -> None:
        header = CHeader("t.h", typedefs=[CTypedef("Flags", CPointer(CType("bool", ("const",))))])
        assert required_includes(header) == ["stdbool.h"]

    def test_both_in_fixed_order(self) -> None:
        header = CHeader(
            "t.h",
            structs=[CStruct("S", [CField("ok", CType("bool")), CField("n", CType("int8_t"))])],
        )
        assert required_includes(header) == ["stdint.h", "stdbool.h"]

    def test_enum_values_do_not_need_stdint(self) -> None:
        header = CHeader("t.h", enums=[CEnum("E", [CEnumValue("A", -1)])])
        assert required_includes(header) == []


class TestOpaque:
    def test_first_use_order_without_duplicates(self) -> None:
        header = CHeader(
            "t.h",
            typedefs=[CTypedef("Handle", CPointer(CType("Engine", opaque=True)))],
            functions=[
                CFunction("open", CPointer(CType("FILE", opaque=True))),
                CFunction("run", CType("void"), [CParameter("e", CPointer(CType("Engine", opaque=True)))]),
            ],
        )
        assert collect_opaque_types(header) == ["Engine", "FILE"]

    def test_forward_declared_before_typedefs(self) -> None:
        header = CHeader(
            "t.h",
            typedefs=[CTypedef("Handle", CPointer(CType("Engine", opaque=True)))],
        )
        out = header_to_c(header)
        assert "typedef struct Engine Engine;\ntypedef Engine* Handle;\n" in out


class TestEarlyStructs:
    def test_typedef_to_struct_forward_declared(self) -> None:
        header = CHeader(
            "t.h",
            typedefs=[CTypedef("PersonRef", CPointer(CType("Person")))],
            structs=[CStruct("Person", [CField("age", CType("int8_t"))])],
        )
        out = header_to_c(header)
        assert "typedef struct Person Person;\ntypedef Person* PersonRef;\n" in out
        assert out.index("typedef Person* PersonRef;") < out.index("typedef struct Person {")

    def test_self_and_later_references(self) -> None:
        header = CHeader(
            "t.h",
            structs=[
                CStruct("List", [CField("head", CPointer(CType("Node")))]),
                CStruct("Node", [CField("next", CPointer(CType("Node")))]),
                CStruct("Owner", [CField("list", CType("List"))]),
            ],
        )
        assert collect_early_structs(header) == ["Node"]

    def test_after_opaque_forward_declarations(self) -> None:
        header = CHeader(
            "t.h",
            typedefs=[
                CTypedef("S", CPointer(CType("Shape"))),
                CTypedef("E", CPointer(CType("Engine", opaque=True))),
            ],
            structs=[CStruct("Shape", [CField("sides", CType("int32_t"))])],
        )
        assert "typedef struct Engine Engine;\ntypedef struct Shape Shape;\ntypedef Shape* S;\n" in header_to_c(header)

    def test_function_references_need_nothing(self) -> None:
        header = CHeader(
            "t.h",
            structs=[CStruct("Person", [CField("age", CType("int8_t"))])],
            functions=[CFunction("make", CType("Person"))],
        )
        assert collect_early_structs(header) == []


class TestHeaderToC:
    def test_empty(self) -> None:
        assert header_to_c(CHeader("empty.h")) == EMPTY_HEADER

    def test_full_layout(self) -> None:
        header = CHeader(
            "actual.h",
            typedefs=[CTypedef("Kg", CType("float"))],
            enums=[CEnum("Eye", [CEnumValue("Blue", -1), CEnumValue("Green")])],
            structs=[CStruct("Person", [CField("age", CType("int8_t")), CField("eyes", CType("Eye"))])],
            functions=[CFunction("Person_describe", CType("void"), [CParameter("person", CType("Person"))])],
        )
        expected = """\
#ifndef abiheader_gen_actual_h
#define abiheader_gen_actual_h

#ifdef __cplusplus
extern "C" {
#endif

#include <stdint.h>

typedef float Kg;

typedef enum Eye {
    Blue = -1,
    Green,
} Eye;

typedef struct Person {
    int8_t age;
    Eye eyes;
} Person;

void Person_describe(Person person);

#ifdef __cplusplus
}
#endif

#endif
"""
        assert header_to_c(header) == expected

    def test_sections_in_fixed_order(self) -> None:
        header = CHeader(
            "t.h",
            typedefs=[CTypedef("T", CType("float"))],
            enums=[CEnum("E", [CEnumValue("A")])],
            structs=[CStruct("S", [CField("x", CType("float"))])],
            functions=[CFunction("f", CType("void"))],
        )
        out = header_to_c(header)
        positions = [out.index(s) for s in ("typedef float T;", "typedef enum E", "typedef struct S", "void f(void);")]
        assert positions == sorted(positions)

    def test_multiple_enums_separated_by_blank_line(self) -> None:
        header = CHeader("t.h", enums=[CEnum("A", [CEnumValue("X")]), CEnum("B", [CEnumValue("Y")])])
        assert "} A;\n\ntypedef enum B {" in header_to_c(header)

    def test_explicit_guard(self) -> None:
        out = header_to_c(CHeader("t.h"), guard="MY_GUARD")
        assert out.startswith("#ifndef MY_GUARD\n#define MY_GUARD\n")

    def test_deterministic(self) -> None:
        def make() -> CHeader:
            return CHeader(
                "t.h",
                typedefs=[CTypedef("H", CPointer(CType("X", opaque=True)))],
                structs=[CStruct("S", [CField("b", CType("bool"))])],
            )

        assert header_to_c(make()) == header_to_c(make())


class TestCHeaderWriter:
    def test_write(self) -> None:
        writer = CHeaderWriter(guard_prefix="mylib")
        assert writer.write(CHeader("api.h")).startswith("#ifndef mylib_api_h\n")

    def test_properties(self) -> None:
        writer = CHeaderWriter()
        assert writer.name == "c"
        assert "C header" in writer.format_description

    def test_rejects_invalid_guard(self) -> None:
        with pytest.raises(ValueError, match="not a valid C identifier"):
            CHeaderWriter(guard="not valid")

    def test_rejects_invalid_prefix(self) -> None:
        with pytest.raises(ValueError, match="not a valid C identifier"):
            CHeaderWriter(guard_prefix="9lives")

    def test_is_writer_backend(self) -> None:
        from abiheader.writers import WriterBackend

        assert isinstance(CHeaderWriter(), WriterBackend)
