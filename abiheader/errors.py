"""Exceptions and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass

from abiheader.ir import SourceLocation


class AbiHeaderError(Exception):
    """Base class for all abiheader errors."""


class InputError(AbiHeaderError):
    """Input could not be read or is malformed. Fatal for the generation."""


class OutputError(AbiHeaderError):
    """The destination could not be written. Fatal for the generation."""


class AliasCycleError(AbiHeaderError):
    """An alias chain revisits one of its own identifiers.

    :param chain: Identifiers in visiting order, ending with the repeated one.
    """

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"alias cycle: {' -> '.join(self.chain)}")


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem that caused a declaration to be dropped.

    :param name: Name of the offending declaration.
    :param kind: Short machine-readable category (``"alias-cycle"``,
        ``"unsupported-alias"``, ``"duplicate-name"``).
    :param reason: Human-readable explanation.
    """

    name: str
    kind: str
    reason: str
    location: SourceLocation | None = None

    def __str__(self) -> str:
        where = f"{self.location}: " if self.location is not None else ""
        return f"{where}{self.name}: {self.reason} [{self.kind}]"
