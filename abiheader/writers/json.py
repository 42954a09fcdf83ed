"""Serialize a resolved header to JSON.

The JSON form lists exactly what the C writer would emit, with every type
already resolved, which makes it convenient for ABI diffing tools and
custom generators.
"""

from __future__ import annotations

import json
from typing import Any

from abiheader.cdecl import (
    CEnum,
    CFunction,
    CHeader,
    CPointer,
    CStruct,
    CType,
    CTypedef,
    CTypeExpr,
)
from abiheader.ir import SourceLocation


def _type_to_dict(t: CTypeExpr) -> dict[str, Any]:
    """Convert a C type expression to a JSON-serializable dict."""
    if isinstance(t, CType):
        d: dict[str, Any] = {"kind": "ctype", "name": t.name}
        if t.qualifiers:
            d["qualifiers"] = list(t.qualifiers)
        if t.opaque:
            d["opaque"] = True
        return d
    elif isinstance(t, CPointer):
        d = {"kind": "pointer", "pointee": _type_to_dict(t.pointee)}
        if t.qualifiers:
            d["qualifiers"] = list(t.qualifiers)
        return d
    else:
        return {"kind": "unknown", "repr": repr(t)}


def _location_to_dict(loc: SourceLocation) -> dict[str, Any]:
    d: dict[str, Any] = {"file": loc.file, "line": loc.line}
    if loc.column is not None:
        d["column"] = loc.column
    return d


def _with_location(d: dict[str, Any], loc: SourceLocation | None) -> dict[str, Any]:
    if loc is not None:
        d["location"] = _location_to_dict(loc)
    return d


def _typedef_to_dict(decl: CTypedef) -> dict[str, Any]:
    d = {"kind": "typedef", "name": decl.name, "type": _type_to_dict(decl.type)}
    return _with_location(d, decl.location)


def _enum_to_dict(decl: CEnum) -> dict[str, Any]:
    values: list[dict[str, Any]] = []
    for v in decl.values:
        entry: dict[str, Any] = {"name": v.name}
        if v.value is not None:
            entry["value"] = v.value
        values.append(entry)
    d = {"kind": "enum", "name": decl.name, "values": values}
    return _with_location(d, decl.location)


def _struct_to_dict(decl: CStruct) -> dict[str, Any]:
    d = {
        "kind": "struct",
        "name": decl.name,
        "fields": [{"name": f.name, "type": _type_to_dict(f.type)} for f in decl.fields],
    }
    return _with_location(d, decl.location)


def _function_to_dict(decl: CFunction) -> dict[str, Any]:
    d = {
        "kind": "function",
        "name": decl.name,
        "return_type": _type_to_dict(decl.return_type),
        "parameters": [{"name": p.name, "type": _type_to_dict(p.type)} for p in decl.parameters],
    }
    return _with_location(d, decl.location)


def header_to_json_dict(header: CHeader) -> dict[str, Any]:
    """Convert a resolved header to a JSON-serializable dict.

    Sections keep the order the C writer uses.
    """
    return {
        "target": header.target,
        "typedefs": [_typedef_to_dict(d) for d in header.typedefs],
        "enums": [_enum_to_dict(d) for d in header.enums],
        "structs": [_struct_to_dict(d) for d in header.structs],
        "functions": [_function_to_dict(d) for d in header.functions],
    }


def header_to_json(header: CHeader, indent: int | None = 2) -> str:
    """Convert a resolved header to a JSON string.

    :param indent: JSON indentation level. None for compact output.
    """
    return json.dumps(header_to_json_dict(header), indent=indent)


class JsonWriter:
    """Writer that serializes the resolved header to JSON.

    Options
    -------
    indent : int | None
        JSON indentation level. Defaults to 2. None for compact output.
    """

    def __init__(self, indent: int | None = 2) -> None:
        self._indent = indent

    def write(self, header: CHeader) -> str:
        """Convert the resolved header to a JSON string."""
        return header_to_json(header, indent=self._indent) + "\n"

    @property
    def name(self) -> str:
        return "json"

    @property
    def format_description(self) -> str:
        return "JSON serialization of the resolved header"


from abiheader.writers import register_writer  # noqa: E402

register_writer(
    "json",
    JsonWriter,
    description="JSON serialization of the resolved header",
)
