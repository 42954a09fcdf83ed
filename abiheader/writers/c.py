"""Generate a C header from a resolved :class:`~abiheader.cdecl.CHeader`.

Output layout
-------------
The header is wrapped in an include guard and an ``extern "C"`` block that
is only active for C++ consumers. Inside it come the support includes (only
the ones actually needed), then four sections in fixed order: typedefs,
enums, structs, functions. Each section keeps source order. Opaque types
referenced anywhere, and exported structs used before their definition, are
forward-declared at the top of the typedefs section.

The output depends only on the header contents and the guard, so
regenerating from unchanged input is byte-identical.

Example
-------
::

    from abiheader.writers import get_writer

    writer = get_writer("c")
    text = writer.write(header)
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import PurePath

from abiheader.cdecl import (
    CEnum,
    CFunction,
    CHeader,
    CPointer,
    CStruct,
    CType,
    CTypedef,
    CTypeExpr,
    base_type,
    referenced_types,
)
from abiheader.primitives import STDBOOL_TYPES, STDINT_TYPES

logger = logging.getLogger(__name__)

DEFAULT_GUARD_PREFIX = "abiheader_gen"
GUARD_PREFIX_ENV = "ABIHEADER_GUARD_PREFIX"

INDENT = "    "

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NON_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_]")


# =============================================================================
# Include guard
# =============================================================================


def default_guard_prefix() -> str:
    """Return the guard prefix, honouring ``ABIHEADER_GUARD_PREFIX``.

    An override that is not a valid C identifier is logged and ignored.
    """
    env_prefix = os.environ.get(GUARD_PREFIX_ENV)
    if env_prefix:
        stripped = env_prefix.strip()
        if _IDENTIFIER_RE.match(stripped):
            return stripped
        logger.warning("%s=%r is not a valid C identifier, ignoring", GUARD_PREFIX_ENV, env_prefix)
    return DEFAULT_GUARD_PREFIX


def guard_token(target: str, prefix: str | None = None) -> str:
    """Derive the include guard for an output target.

    The token is ``<prefix>_<stem>_h`` where ``stem`` is the target's file
    name without extension and with non-identifier characters replaced by
    ``_``. It depends only on the target, so it is stable across runs.

    >>> guard_token("include/my-lib.h", "abiheader_gen")
    'abiheader_gen_my_lib_h'
    """
    if prefix is None:
        prefix = default_guard_prefix()
    stem = PurePath(target).stem or "header"
    return f"{prefix}_{_NON_IDENTIFIER_CHARS.sub('_', stem)}_h"


# =============================================================================
# Type rendering
# =============================================================================


def type_to_c(t: CTypeExpr) -> str:
    """Render a resolved type expression as C.

    Pointer levels are rendered innermost first, so four mutable levels
    around ``int32_t`` give ``int32_t****``.
    """
    if not isinstance(t, (CType, CPointer)):
        raise TypeError(f"not a C type expression: {t!r}")
    return str(t)


# =============================================================================
# Emitters
# =============================================================================


def typedef_to_c(decl: CTypedef) -> str:
    """``typedef <type> <name>;``"""
    return f"typedef {type_to_c(decl.type)} {decl.name};"


def enum_to_c(decl: CEnum) -> str:
    """Render an enum whose tag and typedef share the declaration's name.

    Variants without an explicit value are printed bare so that the C
    compiler continues from the previous value.
    """
    lines = [f"typedef enum {decl.name} {{"]
    for v in decl.values:
        if v.value is not None:
            lines.append(f"{INDENT}{v.name} = {v.value},")
        else:
            lines.append(f"{INDENT}{v.name},")
    lines.append(f"}} {decl.name};")
    return "\n".join(lines)


def struct_to_c(decl: CStruct) -> str:
    """Render a struct with fields in layout order."""
    lines = [f"typedef struct {decl.name} {{"]
    for f in decl.fields:
        lines.append(f"{INDENT}{type_to_c(f.type)} {f.name};")
    lines.append(f"}} {decl.name};")
    return "\n".join(lines)


def function_to_c(decl: CFunction) -> str:
    """Render a prototype. An empty parameter list is ``(void)``."""
    if decl.parameters:
        params = ", ".join(f"{type_to_c(p.type)} {p.name}" for p in decl.parameters)
    else:
        params = "void"
    return f"{type_to_c(decl.return_type)} {decl.name}({params});"


def opaque_to_c(name: str) -> str:
    """Forward-declare a struct by name (opaque, or defined further down)."""
    return f"typedef struct {name} {name};"


# =============================================================================
# Assembly
# =============================================================================


def collect_opaque_types(header: CHeader) -> list[str]:
    """Names of opaque types in order of first use."""
    seen: dict[str, None] = {}
    for decl in header.declarations:
        for t in referenced_types(decl):
            base = base_type(t)
            if base.opaque:
                seen.setdefault(base.name, None)
    return list(seen)


def collect_early_structs(header: CHeader) -> list[str]:
    """Exported structs used before their definition, in order of first use.

    Typedefs come before every struct, and a struct may point at itself or
    at a struct defined later in the structs section.
    """
    defined_at = {s.name: i for i, s in enumerate(header.structs)}
    seen: dict[str, None] = {}
    for td in header.typedefs:
        name = base_type(td.type).name
        if name in defined_at:
            seen.setdefault(name, None)
    for i, s in enumerate(header.structs):
        for f in s.fields:
            name = base_type(f.type).name
            if defined_at.get(name, -1) >= i:
                seen.setdefault(name, None)
    return list(seen)


def required_includes(header: CHeader) -> list[str]:
    """Support headers needed by the emitted types, in fixed order."""
    names = {base_type(t).name for decl in header.declarations for t in referenced_types(decl)}
    includes = []
    if names & STDINT_TYPES:
        includes.append("stdint.h")
    if names & STDBOOL_TYPES:
        includes.append("stdbool.h")
    return includes


def header_to_c(header: CHeader, guard: str | None = None, guard_prefix: str | None = None) -> str:
    """Assemble the complete header text.

    :param header: Resolved declarations.
    :param guard: Explicit include guard. Derived from ``header.target``
        when omitted.
    :param guard_prefix: Prefix for the derived guard.
    :returns: The header, ending with a newline.
    """
    if guard is None:
        guard = guard_token(header.target, guard_prefix)

    lines: list[str] = [
        f"#ifndef {guard}",
        f"#define {guard}",
        "",
        "#ifdef __cplusplus",
        'extern "C" {',
        "#endif",
        "",
    ]

    includes = required_includes(header)
    if includes:
        lines.extend(f"#include <{inc}>" for inc in includes)
        lines.append("")

    typedef_lines = [opaque_to_c(name) for name in collect_opaque_types(header)]
    typedef_lines.extend(opaque_to_c(name) for name in collect_early_structs(header))
    typedef_lines.extend(typedef_to_c(d) for d in header.typedefs)
    if typedef_lines:
        lines.extend(typedef_lines)
        lines.append("")

    for e in header.enums:
        lines.append(enum_to_c(e))
        lines.append("")

    for s in header.structs:
        lines.append(struct_to_c(s))
        lines.append("")

    if header.functions:
        lines.extend(function_to_c(f) for f in header.functions)
        lines.append("")

    lines.extend(
        [
            "#ifdef __cplusplus",
            "}",
            "#endif",
            "",
            "#endif",
        ]
    )
    return "\n".join(lines) + "\n"


class CHeaderWriter:
    """Writer that generates a C header from the resolved declarations.

    Options
    -------
    guard : str | None
        Explicit include guard token. Derived from the header target when
        omitted.
    guard_prefix : str | None
        Prefix for the derived guard. Defaults to ``ABIHEADER_GUARD_PREFIX``
        from the environment, then ``"abiheader_gen"``.

    Example
    -------
    ::

        from abiheader.writers.c import CHeaderWriter

        writer = CHeaderWriter(guard_prefix="mylib")
        text = writer.write(header)
    """

    def __init__(self, guard: str | None = None, guard_prefix: str | None = None) -> None:
        if guard is not None and not _IDENTIFIER_RE.match(guard):
            raise ValueError(f"Include guard is not a valid C identifier: {guard!r}")
        if guard_prefix is not None and not _IDENTIFIER_RE.match(guard_prefix):
            raise ValueError(f"Guard prefix is not a valid C identifier: {guard_prefix!r}")
        self._guard = guard
        self._guard_prefix = guard_prefix

    def write(self, header: CHeader) -> str:
        """Convert the resolved header to C source text."""
        return header_to_c(header, guard=self._guard, guard_prefix=self._guard_prefix)

    @property
    def name(self) -> str:
        return "c"

    @property
    def format_description(self) -> str:
        return "C header with include guard and extern \"C\" block"


# Uses bottom-of-module self-registration. See abiheader/writers/__init__.py
# for the managed circular import pattern.
from abiheader.writers import register_writer  # noqa: E402

register_writer(
    "c",
    CHeaderWriter,
    is_default=True,
    description='C header with include guard and extern "C" block',
)
