"""Select the export-eligible declarations of a module.

The extractor is the first pipeline stage. It sorts declarations by kind,
keeps only those marked for export, and builds the alias table that the
resolver needs. Unmarked declarations are internal and are dropped without a
diagnostic; unsupported shapes and name collisions are reported.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from abiheader.errors import Diagnostic
from abiheader.ir import (
    Declaration,
    Enum,
    Function,
    Named,
    Pointer,
    Struct,
    TypeAlias,
    TypeExpr,
)

logger = logging.getLogger(__name__)


@dataclass
class Extraction:
    """Result of :func:`extract`.

    :param typedefs: Eligible aliases in source order.
    :param enums: Eligible enums in source order.
    :param structs: Eligible structs in source order.
    :param functions: Eligible functions in source order.
    :param aliases: Every supported alias by name, exported or not.
    :param diagnostics: Declarations dropped for a reportable reason.
    """

    typedefs: list[TypeAlias] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    structs: list[Struct] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
    aliases: dict[str, TypeAlias] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def exported_names(self) -> set[str]:
        """Names of the eligible typedefs, enums and structs."""
        return {d.name for d in (*self.typedefs, *self.enums, *self.structs)}


def is_parameterized(t: TypeExpr) -> bool:
    """Check if a type expression contains a generic type application."""
    if isinstance(t, Pointer):
        return is_parameterized(t.inner)
    if isinstance(t, Named):
        return bool(t.args)
    return False


def _is_supported_alias(decl: TypeAlias) -> bool:
    return not decl.type_params and not is_parameterized(decl.target)


def _kind_label(decl: Declaration) -> str:
    if isinstance(decl, TypeAlias):
        return "typedef"
    if isinstance(decl, Enum):
        return "enum"
    if isinstance(decl, Struct):
        return "struct"
    return "function"


def _export_name(decl: Declaration) -> str:
    """Name the declaration occupies in the generated header."""
    if isinstance(decl, Function):
        return decl.external_symbol
    return decl.name


def extract(declarations: Iterable[Declaration]) -> Extraction:
    """Split declarations into per-kind lists of export-eligible members.

    Relative order within each kind is the input order. When two eligible
    declarations would occupy the same name in the header, the first one
    wins and the later one is dropped with a ``duplicate-name`` diagnostic.

    :param declarations: Declarations in original source order.
    :returns: The eligible declarations, the alias table and diagnostics.
    """
    result = Extraction()
    # header name -> first declaration that claimed it
    claimed: dict[str, Declaration] = {}

    def drop(decl: Declaration, kind: str, reason: str) -> None:
        diag = Diagnostic(decl.name, kind, reason, decl.location)
        logger.warning("skipping %s", diag)
        result.diagnostics.append(diag)

    for decl in declarations:
        if isinstance(decl, TypeAlias):
            supported = _is_supported_alias(decl)
            if supported and decl.name not in result.aliases:
                result.aliases[decl.name] = decl
            if not decl.export_eligible:
                continue
            if not supported:
                drop(decl, "unsupported-alias", f"generic type alias is not supported: {decl}")
                continue
        elif not decl.export_eligible:
            logger.debug("%s %s is not marked for export", _kind_label(decl), decl.name)
            continue

        name = _export_name(decl)
        if name in claimed:
            first = claimed[name]
            drop(decl, "duplicate-name", f"name already exported by {_kind_label(first)} {first.name}")
            continue
        claimed[name] = decl

        if isinstance(decl, TypeAlias):
            result.typedefs.append(decl)
        elif isinstance(decl, Enum):
            result.enums.append(decl)
        elif isinstance(decl, Struct):
            result.structs.append(decl)
        elif isinstance(decl, Function):
            result.functions.append(decl)

    return result
