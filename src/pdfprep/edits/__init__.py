"""Page edit commands and the services that apply them."""

from pdfprep.edits.commands import (
    CropEdit,
    EditCommand,
    ResetEdit,
    RotateEdit,
    ScaleEdit,
    TranslateEdit,
)
from pdfprep.edits.crop import CropHandle, CropService
from pdfprep.edits.orchestrator import EditOrchestrator
from pdfprep.edits.rotate import RotationService
from pdfprep.edits.scale import ScaleService

__all__ = [
    "CropEdit",
    "CropHandle",
    "CropService",
    "EditCommand",
    "EditOrchestrator",
    "ResetEdit",
    "RotateEdit",
    "RotationService",
    "ScaleEdit",
    "ScaleService",
    "TranslateEdit",
]
