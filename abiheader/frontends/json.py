"""Read a serialized interface description.

The document is a JSON object with an optional ``"module"`` name and a
``"declarations"`` list in source order::

    {
      "module": "mylib",
      "declarations": [
        {"kind": "typedef", "name": "Int64", "public": true, "target": "i64"},
        {"kind": "struct", "name": "Student", "public": true, "repr_c": true,
         "fields": [{"name": "id", "type": "i32"}]}
      ]
    }

Types are either objects (``{"kind": "primitive" | "pointer" | "named", ...}``)
or shorthand strings: a string that names a primitive (``"i32"``,
``"int32_t"``, ``"()"``) is that primitive, any other string is a named
reference.
"""

from __future__ import annotations

import json
from typing import Any

from abiheader.errors import InputError
from abiheader.ir import (
    Declaration,
    Enum,
    EnumVariant,
    Field,
    Function,
    Module,
    Named,
    Parameter,
    Pointer,
    Primitive,
    PrimitiveKind,
    SourceLocation,
    Struct,
    TypeAlias,
    TypeExpr,
)
from abiheader.primitives import primitive_kind


def _require(d: dict[str, Any], key: str, expected: type, where: str) -> Any:
    if key not in d:
        raise InputError(f"{where}: missing {key!r}")
    value = d[key]
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise InputError(f"{where}: {key!r} must be {expected.__name__}, got {type(value).__name__}")
    return value


def _optional(d: dict[str, Any], key: str, expected: type, default: Any, where: str) -> Any:
    if d.get(key) is None:
        return default
    return _require(d, key, expected, where)


def _list_of_objects(d: dict[str, Any], key: str, where: str) -> list[dict[str, Any]]:
    items = _optional(d, key, list, [], where)
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise InputError(f"{where}: {key}[{i}] must be an object")
    return items


def _type_from_json(t: Any, where: str) -> TypeExpr:
    """Convert a JSON type description to a type expression."""
    if isinstance(t, str):
        kind = primitive_kind(t)
        if kind is not None:
            return Primitive(kind)
        return Named(t)
    if not isinstance(t, dict):
        raise InputError(f"{where}: type must be a string or an object")

    tag = _require(t, "kind", str, where)
    if tag == "primitive":
        name = _require(t, "name", str, where)
        kind = primitive_kind(name)
        if kind is None:
            raise InputError(f"{where}: unknown primitive {name!r}")
        return Primitive(kind)
    elif tag == "pointer":
        if "pointee" not in t:
            raise InputError(f"{where}: missing 'pointee'")
        mutable = _optional(t, "mutable", bool, True, where)
        return Pointer(_type_from_json(t["pointee"], where), mutable=mutable)
    elif tag == "named":
        name = _require(t, "name", str, where)
        args = _optional(t, "args", list, [], where)
        return Named(name, tuple(_type_from_json(a, where) for a in args))
    raise InputError(f"{where}: unknown type kind {tag!r}")


def _location_from_json(d: dict[str, Any], where: str) -> SourceLocation | None:
    loc = _optional(d, "location", dict, None, where)
    if loc is None:
        return None
    return SourceLocation(
        _require(loc, "file", str, where),
        _require(loc, "line", int, where),
        _optional(loc, "column", int, None, where),
    )


def _decl_from_json(d: dict[str, Any], index: int) -> Declaration:
    """Convert one JSON declaration object."""
    where = f"declarations[{index}]"
    kind = _require(d, "kind", str, where)
    name = _require(d, "name", str, where)
    where = f"{where} ({name})"
    is_public = _optional(d, "public", bool, False, where)
    location = _location_from_json(d, where)

    if kind == "typedef":
        if "target" not in d:
            raise InputError(f"{where}: missing 'target'")
        type_params = _optional(d, "type_params", list, [], where)
        return TypeAlias(
            name,
            _type_from_json(d["target"], where),
            type_params=[str(p) for p in type_params],
            is_public=is_public,
            location=location,
        )
    elif kind == "enum":
        variants = [
            EnumVariant(_require(v, "name", str, where), _optional(v, "value", int, None, where))
            for v in _list_of_objects(d, "variants", where)
        ]
        return Enum(
            name,
            variants,
            is_public=is_public,
            repr_c=_optional(d, "repr_c", bool, False, where),
            repr_hint=_optional(d, "repr_hint", str, None, where),
            location=location,
        )
    elif kind == "struct":
        fields = []
        for f in _list_of_objects(d, "fields", where):
            if "type" not in f:
                raise InputError(f"{where}: field missing 'type'")
            fields.append(Field(_require(f, "name", str, where), _type_from_json(f["type"], where)))
        return Struct(
            name,
            fields,
            is_public=is_public,
            repr_c=_optional(d, "repr_c", bool, False, where),
            location=location,
        )
    elif kind == "function":
        params = []
        for p in _list_of_objects(d, "parameters", where):
            if "type" not in p:
                raise InputError(f"{where}: parameter missing 'type'")
            params.append(Parameter(_require(p, "name", str, where), _type_from_json(p["type"], where)))
        if d.get("return_type") is None:
            return_type: TypeExpr = Primitive(PrimitiveKind.VOID)
        else:
            return_type = _type_from_json(d["return_type"], where)
        return Function(
            name,
            params,
            return_type,
            is_public=is_public,
            is_extern=_optional(d, "extern", bool, False, where),
            no_mangle=_optional(d, "no_mangle", bool, False, where),
            export_name=_optional(d, "export_name", str, None, where),
            location=location,
        )
    raise InputError(f"{where}: unknown declaration kind {kind!r}")


def module_from_json_dict(data: Any, filename: str = "<input>") -> Module:
    """Build a module from an already-decoded JSON document.

    :raises InputError: If the document does not describe a module.
    """
    if not isinstance(data, dict):
        raise InputError(f"{filename}: top level must be an object")
    try:
        path = _optional(data, "module", str, filename, filename)
        decls = _list_of_objects(data, "declarations", filename)
        return Module(path, [_decl_from_json(d, i) for i, d in enumerate(decls)])
    except InputError as e:
        if str(e).startswith(filename):
            raise
        raise InputError(f"{filename}: {e}") from e


class JsonFrontend:
    """Front end that reads a JSON interface description.

    Example
    -------
    ::

        from abiheader.frontends import get_frontend

        module = get_frontend("json").load(path.read_text(), str(path))
    """

    def load(self, text: str, filename: str) -> Module:
        """Parse JSON text into a module.

        :raises InputError: On invalid JSON or an invalid document.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InputError(f"{filename}: invalid JSON: {e}") from e
        return module_from_json_dict(data, filename)

    @property
    def name(self) -> str:
        return "json"


from abiheader.frontends import register_frontend  # noqa: E402

register_frontend("json", JsonFrontend, is_default=True)
