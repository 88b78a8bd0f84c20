"""Configuration loading for pdfprep.

Two YAML documents are understood:

* a session config (render sizes, cache capacities, print defaults), and
* an edit script (per-page edits, page order and exclusions) used by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from pdfprep.constants import (
    BACKGROUND_MAX_FILE_MB,
    DEFAULT_PREVIEW_SIZE,
    DEFAULT_THUMBNAIL_QUALITY,
    DEFAULT_THUMBNAIL_SIZE,
    PAGES_PER_SHEET,
    PAPER_SIZES,
    PREVIEW_CACHE_SIZE,
    THUMBNAIL_CACHE_SIZE,
)
from pdfprep.edits.commands import (
    CropEdit,
    EditCommand,
    ResetEdit,
    RotateEdit,
    ScaleEdit,
    TranslateEdit,
)
from pdfprep.exceptions import ConfigError
from pdfprep.model import Box

# ============================================================================
# Enums for constrained string values
# ============================================================================


class ColorMode(str, Enum):
    """Print color modes."""

    COLOR = "color"
    GRAYSCALE = "grayscale"


class PrintQuality(str, Enum):
    """Print quality presets."""

    DRAFT = "draft"
    NORMAL = "normal"
    HIGH = "high"


def _parse_enum(enum_class: type[Enum], value: Any, field: str | None = None) -> Enum:
    """Parse a string value into an enum with validation.

    Raises:
        ConfigError: If the value is not a valid enum member.
    """
    try:
        return enum_class(value)
    except ValueError:
        valid = ", ".join(e.value for e in enum_class)
        raise ConfigError(
            f"Invalid value '{value}'",
            field=field,
            suggestion=f"Valid values are: {valid}",
        )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping", field=name)
    return value


def _positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"Expected a positive integer, got {value!r}", field=field)
    return value


# ============================================================================
# Session configuration
# ============================================================================


@dataclass
class PreviewConfig:
    """Size of interactive previews and how many are cached."""

    width: int = DEFAULT_PREVIEW_SIZE[0]
    height: int = DEFAULT_PREVIEW_SIZE[1]
    cache_size: int = PREVIEW_CACHE_SIZE


@dataclass
class ThumbnailConfig:
    """Bounding box of thumbnails, LRU capacity and JPEG export quality."""

    width: int = DEFAULT_THUMBNAIL_SIZE[0]
    height: int = DEFAULT_THUMBNAIL_SIZE[1]
    cache_size: int = THUMBNAIL_CACHE_SIZE
    quality: int = DEFAULT_THUMBNAIL_QUALITY


@dataclass
class BackgroundConfig:
    """Background pre-rendering after a document loads."""

    enabled: bool = True
    max_file_size_mb: float = BACKGROUND_MAX_FILE_MB


@dataclass(frozen=True)
class PrintSettings:
    """Print options copied into the recipe."""

    paper_size: str = "A4"
    color_mode: ColorMode = ColorMode.COLOR
    duplex: bool = False
    copies: int = 1
    pages_per_sheet: int = 1
    quality: PrintQuality = PrintQuality.NORMAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "paperSize": self.paper_size,
            "colorMode": self.color_mode.value,
            "duplex": self.duplex,
            "copies": self.copies,
            "pagesPerSheet": self.pages_per_sheet,
            "quality": self.quality.value,
        }


@dataclass
class SessionConfig:
    """Everything an EditorSession needs besides the document itself."""

    version: int = 1
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    thumbnails: ThumbnailConfig = field(default_factory=ThumbnailConfig)
    background: BackgroundConfig = field(default_factory=BackgroundConfig)
    print: PrintSettings = field(default_factory=PrintSettings)
    shop_id: str | None = None


def parse_print_settings(data: dict[str, Any]) -> PrintSettings:
    """Parse the 'print' section, validating every field."""
    paper_size = data.get("paper_size", "A4")
    if paper_size not in PAPER_SIZES:
        raise ConfigError(
            f"Unknown paper size '{paper_size}'",
            field="print.paper_size",
            suggestion=f"Valid values are: {', '.join(PAPER_SIZES)}",
        )

    pages_per_sheet = data.get("pages_per_sheet", 1)
    if pages_per_sheet not in PAGES_PER_SHEET:
        raise ConfigError(
            f"Invalid pages per sheet: {pages_per_sheet}",
            field="print.pages_per_sheet",
            suggestion=f"Valid values are: {', '.join(str(n) for n in PAGES_PER_SHEET)}",
        )

    duplex = data.get("duplex", False)
    if not isinstance(duplex, bool):
        raise ConfigError(f"Expected true or false, got {duplex!r}", field="print.duplex")

    return PrintSettings(
        paper_size=paper_size,
        color_mode=_parse_enum(ColorMode, data.get("color_mode", "color"), field="print.color_mode"),
        duplex=duplex,
        copies=_positive_int(data.get("copies", 1), "print.copies"),
        pages_per_sheet=pages_per_sheet,
        quality=_parse_enum(PrintQuality, data.get("quality", "normal"), field="print.quality"),
    )


def parse_session_config(data: dict[str, Any]) -> SessionConfig:
    """Build a SessionConfig from an already-loaded YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML dictionary")

    p = _section(data, "preview")
    preview = PreviewConfig(
        width=_positive_int(p.get("width", DEFAULT_PREVIEW_SIZE[0]), "preview.width"),
        height=_positive_int(p.get("height", DEFAULT_PREVIEW_SIZE[1]), "preview.height"),
        cache_size=_positive_int(p.get("cache_size", PREVIEW_CACHE_SIZE), "preview.cache_size"),
    )

    t = _section(data, "thumbnails")
    quality = t.get("quality", DEFAULT_THUMBNAIL_QUALITY)
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 95:
        raise ConfigError(
            f"Invalid JPEG quality: {quality!r}",
            field="thumbnails.quality",
            suggestion="Use an integer between 1 and 95",
        )
    thumbnails = ThumbnailConfig(
        width=_positive_int(t.get("width", DEFAULT_THUMBNAIL_SIZE[0]), "thumbnails.width"),
        height=_positive_int(t.get("height", DEFAULT_THUMBNAIL_SIZE[1]), "thumbnails.height"),
        cache_size=_positive_int(t.get("cache_size", THUMBNAIL_CACHE_SIZE), "thumbnails.cache_size"),
        quality=quality,
    )

    b = _section(data, "background")
    max_mb = b.get("max_file_size_mb", BACKGROUND_MAX_FILE_MB)
    if isinstance(max_mb, bool) or not isinstance(max_mb, (int, float)) or max_mb < 0:
        raise ConfigError(f"Invalid size limit: {max_mb!r}", field="background.max_file_size_mb")
    background = BackgroundConfig(enabled=bool(b.get("enabled", True)), max_file_size_mb=max_mb)

    destination = _section(data, "destination")
    shop_id = destination.get("shop_id")

    return SessionConfig(
        version=data.get("version", 1),
        preview=preview,
        thumbnails=thumbnails,
        background=background,
        print=parse_print_settings(_section(data, "print")),
        shop_id=str(shop_id) if shop_id is not None else None,
    )


def _load_yaml(path: Path, kind: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {kind.lower()} file {path}: {e}") from e


def load_config(config_path: Path) -> SessionConfig:
    """Load a session configuration file."""
    data = _load_yaml(config_path, "Configuration")
    if data is None:
        return SessionConfig()
    return parse_session_config(data)


# ============================================================================
# Edit scripts
# ============================================================================

EDIT_KEYS = ("crop", "rotate", "scale", "translate", "reset")


@dataclass
class EditStep:
    """Commands applied, in order, to every page a spec selects."""

    pages: str | int | list[int]
    commands: list[EditCommand] = field(default_factory=list)
    fit_crop_to_page: bool | None = None


@dataclass
class EditScript:
    """A batch of edits for one document."""

    steps: list[EditStep] = field(default_factory=list)
    order: list[int] | None = None
    exclude: str | int | list[int] | None = None
    apply_to_all: int | None = None


def parse_edit(key: str, value: Any, step_idx: int | None = None) -> EditCommand:
    """Parse a single edit entry such as ``rotate: 90``.

    Args:
        key: One of crop, rotate, scale, translate, reset
        value: The YAML value for that key
        step_idx: Step index for error messages

    Raises:
        ConfigError: If the key is unknown or the value malformed
    """
    where = f"edits[{step_idx}].{key}" if step_idx is not None else key

    if key == "crop":
        if value is None:
            return CropEdit(None)
        if not isinstance(value, dict):
            raise ConfigError("Crop must be a mapping of x, y, width, height", field=where)
        unknown = set(value) - {"x", "y", "width", "height"}
        if unknown:
            raise ConfigError(f"Unknown crop fields: {', '.join(sorted(unknown))}", field=where)
        try:
            return CropEdit(Box.from_dict(value))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Crop values must be numbers: {e}", field=where) from e

    if key == "rotate":
        if isinstance(value, bool) or not isinstance(value, int) or value % 90 != 0:
            raise ConfigError(
                f"Invalid rotation: {value!r}",
                field=where,
                suggestion="Use a multiple of 90, e.g. 90, -90 or 180",
            )
        return RotateEdit(value)

    if key == "scale":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Scale must be a number, got {value!r}", field=where)
        return ScaleEdit(float(value))

    if key == "translate":
        if not isinstance(value, dict):
            raise ConfigError("Translate must be a mapping of dx, dy", field=where)
        try:
            return TranslateEdit(float(value.get("dx", 0.0)), float(value.get("dy", 0.0)))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Translate values must be numbers: {e}", field=where) from e

    if key == "reset":
        return ResetEdit()

    raise ConfigError(
        f"Unknown edit '{key}'",
        field=where,
        suggestion=f"Valid edits are: {', '.join(EDIT_KEYS)}",
    )


def parse_edit_step(data: dict[str, Any], step_idx: int) -> EditStep:
    if not isinstance(data, dict):
        raise ConfigError("Each edit must be a mapping", field=f"edits[{step_idx}]")
    if "pages" not in data:
        raise ConfigError("Edit is missing 'pages'", field=f"edits[{step_idx}]")

    step = EditStep(pages=data["pages"])
    for key, value in data.items():
        if key == "pages":
            continue
        if key == "fit_crop_to_page":
            step.fit_crop_to_page = bool(value)
            continue
        if key == "reset" and value is False:
            continue
        step.commands.append(parse_edit(key, value, step_idx))
    return step


def parse_edit_script(data: dict[str, Any]) -> EditScript:
    """Build an EditScript from an already-loaded YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigError("Edit script must be a YAML dictionary")

    edits = data.get("edits") or []
    if not isinstance(edits, list):
        raise ConfigError("'edits' must be a list", field="edits")

    order = data.get("order")
    if order is not None and (
        not isinstance(order, list) or not all(isinstance(n, int) and not isinstance(n, bool) for n in order)
    ):
        raise ConfigError("'order' must be a list of page numbers", field="order")

    apply_to_all = data.get("apply_to_all")
    if apply_to_all is not None:
        apply_to_all = _positive_int(apply_to_all, "apply_to_all")

    return EditScript(
        steps=[parse_edit_step(item, i) for i, item in enumerate(edits)],
        order=order,
        exclude=data.get("exclude"),
        apply_to_all=apply_to_all,
    )


def load_edit_script(script_path: Path) -> EditScript:
    """Load an edit script file."""
    data = _load_yaml(script_path, "Edit script")
    if data is None:
        return EditScript()
    return parse_edit_script(data)
