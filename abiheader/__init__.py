"""abiheader - generate C headers from exported declarations."""

from abiheader.cdecl import (
    CDeclaration,
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
    CTypeExpr,
)
from abiheader.errors import (
    AbiHeaderError,
    AliasCycleError,
    Diagnostic,
    InputError,
    OutputError,
)
from abiheader.extractor import Extraction, extract
from abiheader.frontends import get_frontend, is_frontend_available, list_frontends
from abiheader.ir import (
    # Type expressions
    PrimitiveKind,
    Primitive,
    Pointer,
    Named,
    TypeExpr,
    # Declarations
    TypeAlias,
    EnumVariant,
    Enum,
    Field,
    Struct,
    Parameter,
    Function,
    Declaration,
    # Container
    Module,
    SourceLocation,
    # Protocol
    DeclarationSource,
)
from abiheader.pipeline import GenerationResult, build_header, generate, generate_file
from abiheader.resolve import TypeResolver
from abiheader.writers import (
    WriterBackend,
    get_default_writer,
    get_writer,
    get_writer_info,
    is_writer_available,
    list_writers,
    register_writer,
)

__all__ = [
    # Source types
    "PrimitiveKind",
    "Primitive",
    "Pointer",
    "Named",
    "TypeExpr",
    # Source declarations
    "TypeAlias",
    "EnumVariant",
    "Enum",
    "Field",
    "Struct",
    "Parameter",
    "Function",
    "Declaration",
    "Module",
    "SourceLocation",
    "DeclarationSource",
    # Resolved C declarations
    "CType",
    "CPointer",
    "CTypeExpr",
    "CTypedef",
    "CEnumValue",
    "CEnum",
    "CField",
    "CStruct",
    "CParameter",
    "CFunction",
    "CDeclaration",
    "CHeader",
    # Errors
    "AbiHeaderError",
    "InputError",
    "OutputError",
    "AliasCycleError",
    "Diagnostic",
    # Pipeline
    "Extraction",
    "extract",
    "TypeResolver",
    "GenerationResult",
    "build_header",
    "generate",
    "generate_file",
    # Front end API
    "get_frontend",
    "list_frontends",
    "is_frontend_available",
    # Writer API
    "WriterBackend",
    "get_default_writer",
    "get_writer",
    "get_writer_info",
    "is_writer_available",
    "list_writers",
    "register_writer",
]
