"""Run the generation pipeline: extract, resolve, write.

Each call is independent and holds no state between runs, so several
targets may be generated in parallel processes.

Example
-------
::

    from abiheader.frontends import get_frontend
    from abiheader.pipeline import generate_file

    module = get_frontend("json").load(text, "mylib.json")
    result = generate_file([module], "include/mylib.h")
    for diag in result.diagnostics:
        print(diag)
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from abiheader.cdecl import CDeclaration, CEnum, CFunction, CHeader, CStruct, CTypedef, base_type, referenced_types
from abiheader.errors import AliasCycleError, Diagnostic, OutputError
from abiheader.extractor import extract
from abiheader.ir import Declaration, Module
from abiheader.resolve import TypeResolver
from abiheader.writers import get_writer

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation.

    :param text: Complete output text.
    :param header: The resolved declarations the text was rendered from.
    :param diagnostics: Declarations that were dropped, with reasons.
    """

    text: str
    header: CHeader
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _cycle_dependency(resolved: CDeclaration, dropped: set[str]) -> str | None:
    """First type name ``resolved`` references that was dropped, if any."""
    for t in referenced_types(resolved):
        name = base_type(t).name
        if name in dropped:
            return name
    return None


def build_header(declarations: Iterable[Declaration], target: str) -> tuple[CHeader, list[Diagnostic]]:
    """Extract and resolve the exported declarations.

    A declaration whose types hit an alias cycle is dropped with an
    ``alias-cycle`` diagnostic, and so is every declaration that refers to
    a dropped one by name, transitively. All other declarations are kept.

    :param declarations: Declarations in source order.
    :param target: Output target identity, stored on the header.
    :returns: The resolved header and all diagnostics.
    """
    extraction = extract(declarations)
    resolver = TypeResolver(extraction.aliases, extraction.exported_names)
    diagnostics = list(extraction.diagnostics)

    def drop(decl: Declaration, reason: str) -> None:
        diag = Diagnostic(decl.name, "alias-cycle", reason, decl.location)
        logger.warning("skipping %s", diag)
        diagnostics.append(diag)

    resolved: list[tuple[Declaration, CDeclaration]] = []
    dropped: set[str] = set()
    for decl in (*extraction.typedefs, *extraction.enums, *extraction.structs, *extraction.functions):
        try:
            resolved.append((decl, resolver.resolve_declaration(decl)))
        except AliasCycleError as e:
            drop(decl, str(e))
            dropped.add(decl.name)

    while dropped:
        newly_dropped: set[str] = set()
        kept = []
        for decl, c_decl in resolved:
            dependency = _cycle_dependency(c_decl, dropped)
            if dependency is None:
                kept.append((decl, c_decl))
            else:
                drop(decl, f"depends on {dependency}, which was dropped for an alias cycle")
                newly_dropped.add(c_decl.name)
        resolved = kept
        dropped = newly_dropped

    header = CHeader(target)
    for _, c_decl in resolved:
        if isinstance(c_decl, CTypedef):
            header.typedefs.append(c_decl)
        elif isinstance(c_decl, CEnum):
            header.enums.append(c_decl)
        elif isinstance(c_decl, CStruct):
            header.structs.append(c_decl)
        elif isinstance(c_decl, CFunction):
            header.functions.append(c_decl)

    return header, diagnostics


def generate(
    modules: Sequence[Module],
    target: str,
    writer: str | None = None,
    **writer_options: object,
) -> GenerationResult:
    """Render the exported declarations of ``modules`` as one output text.

    Declarations from several modules are flattened into one namespace in
    the order given.

    :param modules: Source modules.
    :param target: Output target identity (usually the destination path).
    :param writer: Writer name, or None for the default (``"c"``).
    :param writer_options: Forwarded to the writer constructor.
    """
    declarations = [d for m in modules for d in m.declarations]
    header, diagnostics = build_header(declarations, target)
    text = get_writer(writer, **writer_options).write(header)
    logger.info(
        "%s: %d declarations emitted, %d skipped",
        target,
        len(header.declarations),
        len(diagnostics),
    )
    return GenerationResult(text, header, diagnostics)


def _target_mode(dest: Path) -> int:
    """Mode for a new ``dest``: the existing file's, else 0o666 less the umask."""
    try:
        return stat.S_IMODE(dest.stat().st_mode)
    except FileNotFoundError:
        # os.umask can only be read by setting it
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_atomic(path: str | os.PathLike[str], text: str) -> None:
    """Write ``text`` to ``path`` so that readers see the old file or the new one.

    The text goes to a temporary file in the destination directory, which
    then replaces the destination. The result keeps the mode of the file it
    replaces; a new file gets the usual mode for the current umask.

    :raises OutputError: If the destination cannot be written. No temporary
        file is left behind.
    """
    dest = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
    except OSError as e:
        raise OutputError(f"cannot write {dest}: {e}") from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp_name, _target_mode(dest))
        os.replace(tmp_name, dest)
    except BaseException as e:
        Path(tmp_name).unlink(missing_ok=True)
        if isinstance(e, OSError):
            raise OutputError(f"cannot write {dest}: {e}") from e
        raise


def generate_file(
    modules: Sequence[Module],
    destination: str | os.PathLike[str],
    writer: str | None = None,
    **writer_options: object,
) -> GenerationResult:
    """Generate output for ``modules`` and write it to ``destination``.

    The guard is derived from the destination's file name.

    :raises OutputError: If the destination cannot be written.
    """
    result = generate(modules, os.fspath(destination), writer, **writer_options)
    write_atomic(destination, result.text)
    logger.debug("wrote %s", destination)
    return result
