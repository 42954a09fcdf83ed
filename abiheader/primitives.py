"""Fixed mapping between primitive kinds and portable C types."""

from __future__ import annotations

from abiheader.ir import PrimitiveKind

# Maps each primitive kind to its C spelling.
PRIMITIVE_C_NAMES: dict[PrimitiveKind, str] = {
    PrimitiveKind.VOID: "void",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.I8: "int8_t",
    PrimitiveKind.I16: "int16_t",
    PrimitiveKind.I32: "int32_t",
    PrimitiveKind.I64: "int64_t",
    PrimitiveKind.U8: "uint8_t",
    PrimitiveKind.U16: "uint16_t",
    PrimitiveKind.U32: "uint32_t",
    PrimitiveKind.U64: "uint64_t",
    PrimitiveKind.ISIZE: "intptr_t",
    PrimitiveKind.USIZE: "uintptr_t",
    PrimitiveKind.F32: "float",
    PrimitiveKind.F64: "double",
}

# Inverse of PRIMITIVE_C_NAMES, for front ends that spell types the C way.
C_PRIMITIVE_KINDS: dict[str, PrimitiveKind] = {c: kind for kind, c in PRIMITIVE_C_NAMES.items()}

# C names that need <stdint.h>.
STDINT_TYPES: frozenset[str] = frozenset(
    {
        "int8_t",
        "int16_t",
        "int32_t",
        "int64_t",
        "uint8_t",
        "uint16_t",
        "uint32_t",
        "uint64_t",
        "intptr_t",
        "uintptr_t",
    }
)

# C names that need <stdbool.h>.
STDBOOL_TYPES: frozenset[str] = frozenset({"bool"})


def primitive_kind(name: str) -> PrimitiveKind | None:
    """Look up a primitive kind by native (``"i32"``) or C (``"int32_t"``) name.

    :returns: The kind, or None if ``name`` is not a primitive.
    """
    try:
        return PrimitiveKind(name)
    except ValueError:
        return C_PRIMITIVE_KINDS.get(name)
