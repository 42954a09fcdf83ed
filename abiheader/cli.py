"""Command line driver.

Reads one or more interface descriptions and writes a single header::

    abiheader -o include/mylib.h mylib.json

Exit status is 0 on success (skipped declarations are reported as warnings),
1 on fatal errors and 2 on usage errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from abiheader.errors import AbiHeaderError, InputError
from abiheader.frontends import get_default_frontend, get_frontend, list_frontends
from abiheader.ir import Module
from abiheader.pipeline import generate, generate_file
from abiheader.writers import get_default_writer, get_writer_info, list_writers

logger = logging.getLogger("abiheader")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="abiheader",
        description="Generate a C header from exported declarations.",
    )
    parser.add_argument("inputs", nargs="*", type=Path, metavar="INPUT", help="Interface description files")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Destination file (default: stdout)")
    parser.add_argument(
        "-f",
        "--frontend",
        choices=list_frontends(),
        default=get_default_frontend(),
        help="Input format (default: %(default)s)",
    )
    parser.add_argument(
        "-w",
        "--writer",
        choices=list_writers(),
        default=get_default_writer(),
        help="Output format (default: %(default)s)",
    )
    parser.add_argument("--guard", default=None, help="Explicit include guard token (c writer)")
    parser.add_argument(
        "--guard-prefix",
        default=None,
        help="Prefix for the derived include guard (c writer, default: $ABIHEADER_GUARD_PREFIX or abiheader_gen)",
    )
    parser.add_argument("--list-writers", action="store_true", help="List available writers and exit")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return parser


def _load_modules(paths: list[Path], frontend_name: str) -> list[Module]:
    frontend = get_frontend(frontend_name)
    modules = []
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"cannot read {path}: {e}") from e
        modules.append(frontend.load(text, str(path)))
    return modules


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on error."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    if args.list_writers:
        for info in get_writer_info():
            marker = " (default)" if info["is_default"] else ""
            print(f"{info['name']}: {info['description']}{marker}")
        return 0

    if not args.inputs:
        parser.error("at least one INPUT is required")

    writer_options: dict[str, object] = {}
    if args.writer == "c":
        if args.guard is not None:
            writer_options["guard"] = args.guard
        if args.guard_prefix is not None:
            writer_options["guard_prefix"] = args.guard_prefix

    try:
        modules = _load_modules(args.inputs, args.frontend)
        if args.output is not None:
            result = generate_file(modules, args.output, args.writer, **writer_options)
        else:
            target = args.inputs[0].with_suffix(".h").name
            result = generate(modules, target, args.writer, **writer_options)
            sys.stdout.write(result.text)
    except (AbiHeaderError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    if result.diagnostics:
        logger.warning("%d declaration(s) skipped", len(result.diagnostics))
    return 0


if __name__ == "__main__":
    sys.exit(main())
