"""Front ends that turn source input into an :class:`~abiheader.ir.Module`.

Available Front Ends
--------------------
json
    Serialized interface description (see :mod:`abiheader.frontends.json`).

Example
-------
::

    from abiheader.frontends import get_frontend

    frontend = get_frontend("json")
    module = frontend.load(text, "mylib.json")
"""

from __future__ import annotations

from abiheader.ir import DeclarationSource

__all__ = [
    "DeclarationSource",
    "get_default_frontend",
    "get_frontend",
    "is_frontend_available",
    "list_frontends",
    "register_frontend",
]

# Front ends are registered lazily on first lookup.
_FRONTEND_REGISTRY: dict[str, type[DeclarationSource]] = {}
_DEFAULT_FRONTEND: str | None = None
_FRONTENDS_LOADED: bool = False


def register_frontend(name: str, frontend_class: type[DeclarationSource], is_default: bool = False) -> None:
    """Register a front end.

    Called by front end modules during import. The first registered front
    end becomes the default unless ``is_default`` is set on a later one.

    :param name: Unique name for the front end (e.g., ``"json"``).
    :param frontend_class: Class implementing :class:`DeclarationSource`.
    :param is_default: If True, this becomes the default for :func:`get_frontend`.
    :raises ValueError: If ``name`` is already registered.
    """
    global _DEFAULT_FRONTEND  # pylint: disable=global-statement
    if name in _FRONTEND_REGISTRY:
        raise ValueError(f"Front end already registered: {name!r}")
    _FRONTEND_REGISTRY[name] = frontend_class
    if is_default or _DEFAULT_FRONTEND is None:
        _DEFAULT_FRONTEND = name


def list_frontends() -> list[str]:
    """List names of all registered front ends."""
    _ensure_frontends_loaded()
    return list(_FRONTEND_REGISTRY.keys())


def is_frontend_available(name: str) -> bool:
    """Check if a front end is registered under ``name``."""
    _ensure_frontends_loaded()
    return name in _FRONTEND_REGISTRY


def get_frontend(name: str | None = None) -> DeclarationSource:
    """Get a front end instance.

    :param name: Front end name, or None for the default.
    :raises ValueError: If the requested front end is not available.
    """
    _ensure_frontends_loaded()

    if name is None:
        if _DEFAULT_FRONTEND is None:
            raise ValueError("No front ends available")
        name = _DEFAULT_FRONTEND

    if name not in _FRONTEND_REGISTRY:
        available = ", ".join(_FRONTEND_REGISTRY.keys()) or "(none)"
        raise ValueError(f"Unknown front end: {name!r}. Available: {available}")

    return _FRONTEND_REGISTRY[name]()


def get_default_frontend() -> str:
    """Get the name of the default front end.

    :raises ValueError: If no front ends are available.
    """
    _ensure_frontends_loaded()

    if _DEFAULT_FRONTEND is None:
        raise ValueError("No front ends available")
    return _DEFAULT_FRONTEND


def _ensure_frontends_loaded() -> None:
    """Lazily import front end modules to populate the registry.

    NOTE: Managed circular import pattern, same as
    :func:`abiheader.writers._ensure_writers_loaded`.
    """
    global _FRONTENDS_LOADED  # pylint: disable=global-statement

    if _FRONTENDS_LOADED:
        return

    _FRONTENDS_LOADED = True

    import abiheader.frontends.json  # noqa: F401
