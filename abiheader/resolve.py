"""Resolve source type expressions to C type expressions.

Resolution rules
----------------
* Primitives map through :data:`abiheader.primitives.PRIMITIVE_C_NAMES`.
* Pointers keep their depth and per-level mutability. A ``*const T`` becomes
  a pointer to const-qualified ``T``.
* A named alias is followed through its whole chain so that cycles are always
  detected. Exported typedefs stay referenced by name; internal aliases are
  replaced by what they resolve to.
* Exported enums and structs are referenced by name.
* Anything else is opaque and gets forward-declared by the writer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from abiheader.cdecl import (
    CDeclaration,
    CEnum,
    CEnumValue,
    CField,
    CFunction,
    CParameter,
    CPointer,
    CStruct,
    CType,
    CTypedef,
    CTypeExpr,
)
from abiheader.errors import AliasCycleError
from abiheader.ir import (
    Declaration,
    Enum,
    Function,
    Named,
    Pointer,
    Primitive,
    Struct,
    TypeAlias,
    TypeExpr,
)
from abiheader.primitives import PRIMITIVE_C_NAMES

logger = logging.getLogger(__name__)


def _add_const(t: CTypeExpr) -> CTypeExpr:
    """Const-qualify a pointee: ``int`` -> ``const int``, ``int*`` -> ``int* const``."""
    if isinstance(t, CPointer):
        return CPointer(t.pointee, ("const",) + t.qualifiers)
    return CType(t.name, ("const",) + t.qualifiers, opaque=t.opaque)


class TypeResolver:
    """Maps source types to C types for one generation.

    :param aliases: Every alias declaration in the module, exported or not,
        keyed by name.
    :param exported_names: Names of the typedefs, enums and structs that will
        be emitted in the header.
    """

    def __init__(self, aliases: Mapping[str, TypeAlias], exported_names: Iterable[str] = ()) -> None:
        self._aliases = dict(aliases)
        self._exported = frozenset(exported_names)

    def resolve(self, t: TypeExpr, visited: tuple[str, ...] = ()) -> CTypeExpr:
        """Resolve a type expression.

        :param t: Source type expression.
        :param visited: Alias names already entered on this chain.
        :raises AliasCycleError: If an alias chain revisits a name.
        """
        if isinstance(t, Primitive):
            return CType(PRIMITIVE_C_NAMES[t.kind])
        if isinstance(t, Pointer):
            pointee = self.resolve(t.inner, visited)
            if not t.mutable:
                pointee = _add_const(pointee)
            return CPointer(pointee)
        if isinstance(t, Named):
            if t.args:
                logger.warning("type arguments are not supported, %s is resolved as %s", t, t.name)
            return self._resolve_named(t.name, visited)
        raise TypeError(f"not a type expression: {t!r}")

    def _resolve_named(self, name: str, visited: tuple[str, ...]) -> CTypeExpr:
        if name in visited:
            raise AliasCycleError([*visited, name])
        alias = self._aliases.get(name)
        if alias is not None:
            concrete = self.resolve(alias.target, (*visited, name))
            if name in self._exported:
                return CType(name)
            return concrete
        if name in self._exported:
            return CType(name)
        logger.debug("%s has no known layout, treating it as opaque", name)
        return CType(name, opaque=True)

    def resolve_declaration(self, decl: Declaration) -> CDeclaration:
        """Resolve every type in a declaration.

        :raises AliasCycleError: If any type in the declaration hits a cycle.
        """
        if isinstance(decl, TypeAlias):
            return CTypedef(decl.name, self.resolve(decl.target, (decl.name,)), decl.location)
        if isinstance(decl, Enum):
            return CEnum(
                decl.name,
                [CEnumValue(v.name, v.value) for v in decl.variants],
                decl.location,
            )
        if isinstance(decl, Struct):
            return CStruct(
                decl.name,
                [CField(f.name, self.resolve(f.type)) for f in decl.fields],
                decl.location,
            )
        if isinstance(decl, Function):
            return CFunction(
                decl.external_symbol,
                self.resolve(decl.return_type),
                [CParameter(p.name, self.resolve(p.type)) for p in decl.parameters],
                decl.location,
            )
        raise TypeError(f"not a declaration: {decl!r}")
