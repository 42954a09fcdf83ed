"""Intermediate representation of exported source declarations.

These types describe the declarations of a compiled module as seen from the
source language, before any C mapping takes place. Front ends build a
:class:`Module` from whatever they read; the extractor and resolver consume it.

Type expressions
----------------
* :class:`Primitive` -- fixed-width scalar (``i32``, ``f64``, ``bool``, ...)
* :class:`Pointer` -- raw pointer, mutable or const, arbitrarily nested
* :class:`Named` -- reference to another declaration or an opaque type

Declarations
------------
* :class:`TypeAlias`, :class:`Enum`, :class:`Struct`, :class:`Function`
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, Union, runtime_checkable

# =============================================================================
# Type expressions
# =============================================================================


class PrimitiveKind(enum.Enum):
    """Fixed-width primitive kinds understood by the engine."""

    VOID = "()"
    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    ISIZE = "isize"
    USIZE = "usize"
    F32 = "f32"
    F64 = "f64"


@dataclass(frozen=True)
class Primitive:
    """A primitive scalar type.

    Example::

        Primitive(PrimitiveKind.I32)  # i32
    """

    kind: PrimitiveKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class Pointer:
    """A raw pointer.

    Nesting is expressed by wrapping: ``*mut *const u8`` is
    ``Pointer(Pointer(Primitive(U8), mutable=False), mutable=True)``.

    :param inner: The pointee type.
    :param mutable: False for a pointer to const data.
    """

    inner: TypeExpr
    mutable: bool = True

    def __str__(self) -> str:
        return f"*{'mut' if self.mutable else 'const'} {self.inner}"


@dataclass(frozen=True)
class Named:
    """A reference to a type by identifier.

    The identifier may name an alias, enum or struct in the same module, or
    an external type the engine knows nothing about (opaque).

    :param name: Type identifier.
    :param args: Type arguments for a parameterized type application such as
        ``Result<T, ()>``. Empty for plain references.
    """

    name: str
    args: tuple[TypeExpr, ...] = ()

    def __str__(self) -> str:
        if self.args:
            return f"{self.name}<{', '.join(str(a) for a in self.args)}>"
        return self.name


TypeExpr = Union[Primitive, Pointer, Named]


# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class SourceLocation:
    """Location of a declaration in its original source."""

    file: str
    line: int
    column: int | None = None

    def __str__(self) -> str:
        if self.column is not None:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass
class TypeAlias:
    """A type alias (``pub type Name = Target;``).

    Eligibility depends on visibility only.

    :param name: Alias name.
    :param target: The aliased type expression.
    :param type_params: Generic parameters. A non-empty list makes the alias
        unsupported.
    :param is_public: Declared with public visibility.
    """

    name: str
    target: TypeExpr
    type_params: list[str] = field(default_factory=list)
    is_public: bool = False
    location: SourceLocation | None = None

    @property
    def export_eligible(self) -> bool:
        return self.is_public

    def __str__(self) -> str:
        params = f"<{', '.join(self.type_params)}>" if self.type_params else ""
        return f"type {self.name}{params} = {self.target}"


@dataclass
class EnumVariant:
    """A single enum variant with an optional explicit discriminant."""

    name: str
    value: int | None = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.name} = {self.value}"
        return self.name


@dataclass
class Enum:
    """A field-less enumeration.

    :param name: Enum name.
    :param variants: Variants in source order.
    :param is_public: Declared with public visibility.
    :param repr_c: Carries the C layout-stability marker.
    :param repr_hint: Declared discriminant width (``"u8"``, ``"i32"``...).
        Informational only.
    """

    name: str
    variants: list[EnumVariant] = field(default_factory=list)
    is_public: bool = False
    repr_c: bool = False
    repr_hint: str | None = None
    location: SourceLocation | None = None

    @property
    def export_eligible(self) -> bool:
        return self.is_public and self.repr_c

    def __str__(self) -> str:
        return f"enum {self.name}"


@dataclass
class Field:
    """A struct field. Order within a struct mirrors memory layout."""

    name: str
    type: TypeExpr

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


@dataclass
class Struct:
    """A struct with named fields.

    :param fields: Fields in declaration (layout) order.
    :param is_public: Declared with public visibility.
    :param repr_c: Carries the C layout-stability marker.
    """

    name: str
    fields: list[Field] = field(default_factory=list)
    is_public: bool = False
    repr_c: bool = False
    location: SourceLocation | None = None

    @property
    def export_eligible(self) -> bool:
        return self.is_public and self.repr_c

    def __str__(self) -> str:
        return f"struct {self.name}"


@dataclass
class Parameter:
    """A function parameter."""

    name: str
    type: TypeExpr

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


@dataclass
class Function:
    """A function declaration.

    :param name: Source-local name.
    :param parameters: Parameters in order.
    :param return_type: Return type; void when the function returns nothing.
    :param is_public: Declared with public visibility.
    :param is_extern: Declared with C (external) linkage.
    :param no_mangle: Symbol name is not mangled.
    :param export_name: Linker symbol when it differs from ``name``.
    """

    name: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: TypeExpr = field(default_factory=lambda: Primitive(PrimitiveKind.VOID))
    is_public: bool = False
    is_extern: bool = False
    no_mangle: bool = False
    export_name: str | None = None
    location: SourceLocation | None = None

    @property
    def external_symbol(self) -> str:
        return self.export_name or self.name

    @property
    def export_eligible(self) -> bool:
        return self.is_public and self.is_extern and self.no_mangle

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn {self.name}({params}) -> {self.return_type}"


Declaration = Union[TypeAlias, Enum, Struct, Function]


# =============================================================================
# Container
# =============================================================================


@dataclass
class Module:
    """All declarations read from one source module, in source order.

    :param path: Identity of the source (file name or module path).
    :param declarations: Declarations in original order.
    """

    path: str
    declarations: list[Declaration] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Module({self.path}, {len(self.declarations)} declarations)"


# =============================================================================
# Front end protocol
# =============================================================================


@runtime_checkable
class DeclarationSource(Protocol):
    """Protocol for front ends that produce a :class:`Module`.

    A front end may be a parser, a build-system integration, or a reader for
    a serialized interface description. It must raise
    :class:`abiheader.errors.InputError` for input it cannot read.
    """

    def load(self, text: str, filename: str) -> Module:
        """Build a module from source text.

        :param text: Raw input text.
        :param filename: Name used for the module path and diagnostics.
        """
        ...

    @property
    def name(self) -> str:
        """Front end name (e.g. ``"json"``)."""
        ...
