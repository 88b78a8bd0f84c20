"""Edit commands accepted by the orchestrator.

Each command is a small frozen dataclass; EditCommand is the closed union
of all of them.
"""

from __future__ import annotations

from dataclasses import dataclass

from pdfprep.model import CropBox


@dataclass(frozen=True)
class CropEdit:
    """Set the crop, in the unrotated page frame. None clears it."""

    box: CropBox | None


@dataclass(frozen=True)
class RotateEdit:
    """Rotate clockwise by a delta (usually 90, -90 or 180)."""

    delta: int


@dataclass(frozen=True)
class ScaleEdit:
    """Set an absolute scale in percent."""

    percent: float


@dataclass(frozen=True)
class TranslateEdit:
    """Shift the page by a normalized offset, added to the current one."""

    dx: float
    dy: float


@dataclass(frozen=True)
class ResetEdit:
    """Drop every transform on the page."""


EditCommand = CropEdit | RotateEdit | ScaleEdit | TranslateEdit | ResetEdit

__all__ = [
    "CropEdit",
    "EditCommand",
    "ResetEdit",
    "RotateEdit",
    "ScaleEdit",
    "TranslateEdit",
]
