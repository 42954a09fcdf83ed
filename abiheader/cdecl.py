"""Resolved C declarations.

The resolver turns source declarations from :mod:`abiheader.ir` into these
types. Every type here is already expressed in C terms, so writers never
need to consult the alias table or sibling declarations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from abiheader.ir import SourceLocation


@dataclass(frozen=True)
class CType:
    """A C base type: a mapped primitive or a reference by name.

    :param name: C spelling (``"int32_t"``, ``"Person"``, ...).
    :param qualifiers: Type qualifiers such as ``"const"``.
    :param opaque: The name has no layout information and must be
        forward-declared.
    """

    name: str
    qualifiers: tuple[str, ...] = ()
    opaque: bool = False

    def __str__(self) -> str:
        if self.qualifiers:
            return f"{' '.join(self.qualifiers)} {self.name}"
        return self.name


@dataclass(frozen=True)
class CPointer:
    """A C pointer.

    Qualifiers apply to the pointer itself: ``CPointer(CType("int"), ("const",))``
    is ``int* const``.
    """

    pointee: CTypeExpr
    qualifiers: tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.qualifiers:
            return f"{self.pointee}* {' '.join(self.qualifiers)}"
        return f"{self.pointee}*"


CTypeExpr = Union[CType, CPointer]


@dataclass
class CTypedef:
    """``typedef <type> <name>;``"""

    name: str
    type: CTypeExpr
    location: SourceLocation | None = None


@dataclass
class CEnumValue:
    name: str
    value: int | None = None


@dataclass
class CEnum:
    """``typedef enum <name> { ... } <name>;``"""

    name: str
    values: list[CEnumValue] = field(default_factory=list)
    location: SourceLocation | None = None


@dataclass
class CField:
    name: str
    type: CTypeExpr


@dataclass
class CStruct:
    """``typedef struct <name> { ... } <name>;``"""

    name: str
    fields: list[CField] = field(default_factory=list)
    location: SourceLocation | None = None


@dataclass
class CParameter:
    name: str
    type: CTypeExpr


@dataclass
class CFunction:
    """A prototype under the external linkage symbol."""

    name: str
    return_type: CTypeExpr
    parameters: list[CParameter] = field(default_factory=list)
    location: SourceLocation | None = None


CDeclaration = Union[CTypedef, CEnum, CStruct, CFunction]


@dataclass
class CHeader:
    """The resolved, ordered content of one generated header.

    :param target: Identity of the output target, usually the destination
        file name. Writers derive the include guard from it.
    :param typedefs: Typedefs in source order.
    :param enums: Enums in source order.
    :param structs: Structs in source order.
    :param functions: Function prototypes in source order.
    """

    target: str
    typedefs: list[CTypedef] = field(default_factory=list)
    enums: list[CEnum] = field(default_factory=list)
    structs: list[CStruct] = field(default_factory=list)
    functions: list[CFunction] = field(default_factory=list)

    @property
    def declarations(self) -> list[CDeclaration]:
        """All declarations in section order."""
        return [*self.typedefs, *self.enums, *self.structs, *self.functions]

    def __str__(self) -> str:
        return f"CHeader({self.target}, {len(self.declarations)} declarations)"


def base_type(t: CTypeExpr) -> CType:
    """Strip every pointer level: ``const int32_t* const*`` -> ``const int32_t``."""
    while isinstance(t, CPointer):
        t = t.pointee
    return t


def referenced_types(decl: CDeclaration) -> list[CTypeExpr]:
    """All type expressions a declaration references, in textual order."""
    if isinstance(decl, CTypedef):
        return [decl.type]
    if isinstance(decl, CStruct):
        return [f.type for f in decl.fields]
    if isinstance(decl, CFunction):
        return [decl.return_type] + [p.type for p in decl.parameters]
    return []
