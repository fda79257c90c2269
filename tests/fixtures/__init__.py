"""Test fixture helpers."""

from __future__ import annotations

from pathlib import Path

_FIXTURE_ROOT = Path(__file__).parent


def load_text(name: str) -> str:
    """Load a text fixture by filename."""

    return (_FIXTURE_ROOT / name).read_text(encoding="utf-8")
