"""Shared fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _no_guard_prefix_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ABIHEADER_GUARD_PREFIX from leaking into tests."""
    monkeypatch.delenv("ABIHEADER_GUARD_PREFIX", raising=False)
