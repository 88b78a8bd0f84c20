"""Recipe generation: the final, serializable description of a print job."""

from __future__ import annotations

import json
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pdfprep.config import PrintSettings, parse_print_settings
from pdfprep.constants import RECIPE_TYPE, RECIPE_VERSION
from pdfprep.exceptions import ConfigError, RecipeError
from pdfprep.logging_config import get_logger
from pdfprep.model import PageTransforms
from pdfprep.state.metadata import MetadataStore
from pdfprep.state.pages import PageState
from pdfprep.validation import RecipeValidator, ValidationResult

logger = get_logger(__name__)

DEFAULT_FILE_TYPE = "application/pdf"


@dataclass(frozen=True)
class RecipeSource:
    """Identity of the document the recipe was made from."""

    file_name: str
    file_size: int
    file_type: str
    total_pages: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "fileType": self.file_type,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class RecipePage:
    """One included page with its final transforms."""

    page_number: int
    original_width: float
    original_height: float
    transforms: PageTransforms
    has_edits: bool
    is_cropped: bool
    fit_crop_to_page: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "originalDimensions": {"width": self.original_width, "height": self.original_height},
            "transforms": self.transforms.to_dict(),
            "hasEdits": self.has_edits,
            "isCropped": self.is_cropped,
            "fitCropToPage": self.fit_crop_to_page,
        }


@dataclass(frozen=True)
class Recipe:
    """Immutable snapshot handed to the print engine."""

    source: RecipeSource
    print: PrintSettings
    pages: tuple[RecipePage, ...]
    shop_id: str | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = RECIPE_VERSION
    type: str = RECIPE_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "type": self.type,
            "generatedAt": self.generated_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "source": self.source.to_dict(),
            "print": self.print.to_dict(),
            "pages": [page.to_dict() for page in self.pages],
            "destination": {"shopId": self.shop_id},
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


class RecipeService:
    """Builds and validates recipes from the current document state.

    Reads page order and inclusion from PageState and transforms from the
    MetadataStore; it never modifies either.
    """

    def __init__(
        self,
        store: MetadataStore,
        pages: PageState,
        options: PrintSettings | None = None,
        shop_id: str | None = None,
    ):
        self.store = store
        self.pages = pages
        self._defaults = (options or PrintSettings(), shop_id)
        self._options = self._defaults[0]
        self._shop_id = shop_id
        self._source: RecipeSource | None = None
        self.validator = RecipeValidator()

    # === Source ===

    @property
    def source(self) -> RecipeSource | None:
        return self._source

    def set_source(
        self,
        file_name: str,
        file_size: int,
        total_pages: int,
        file_type: str | None = None,
    ) -> None:
        self._source = RecipeSource(
            file_name=file_name,
            file_size=file_size,
            file_type=file_type or DEFAULT_FILE_TYPE,
            total_pages=total_pages,
        )

    def set_source_from_path(self, path: Path, total_pages: int) -> None:
        """Register a source file, reading its size and guessing its type."""
        path = Path(path)
        file_type, _ = mimetypes.guess_type(path.name)
        self.set_source(path.name, path.stat().st_size, total_pages, file_type)

    def clear_source(self) -> None:
        self._source = None

    # === Options ===

    @property
    def options(self) -> PrintSettings:
        return self._options

    @property
    def shop_id(self) -> str | None:
        return self._shop_id

    def set_options(self, **changes: Any) -> PrintSettings:
        """Update print options by field name; shop_id is accepted too.

        Raises:
            ConfigError: On unknown fields or invalid values
        """
        if "shop_id" in changes:
            shop_id = changes.pop("shop_id")
            self._shop_id = str(shop_id) if shop_id is not None else None

        current = {
            "paper_size": self._options.paper_size,
            "color_mode": self._options.color_mode.value,
            "duplex": self._options.duplex,
            "copies": self._options.copies,
            "pages_per_sheet": self._options.pages_per_sheet,
            "quality": self._options.quality.value,
        }
        unknown = set(changes) - set(current)
        if unknown:
            raise ConfigError(
                f"Unknown print option(s): {', '.join(sorted(unknown))}",
                suggestion=f"Valid options are: {', '.join(current)}, shop_id",
            )
        for name, value in changes.items():
            current[name] = getattr(value, "value", value)
        self._options = parse_print_settings(current)
        return self._options

    def reset_options(self) -> None:
        self._options, self._shop_id = self._defaults

    # === Output ===

    def generate(self) -> Recipe:
        """Snapshot the included pages, in current order.

        Raises:
            RecipeError: If no source file has been registered
        """
        if self._source is None:
            raise RecipeError("Source file info not set")

        pages = []
        for info in self.pages.get_included():
            meta = self.store.get(info.page_number)
            transforms = self.store.get_transforms(info.page_number)
            width, height = meta.original_dimensions if meta else (info.width, info.height)
            pages.append(RecipePage(
                page_number=info.page_number,
                original_width=width,
                original_height=height,
                transforms=transforms,
                has_edits=self.store.is_edited(info.page_number),
                is_cropped=transforms.crop is not None,
                fit_crop_to_page=self.store.get_fit_crop_to_page(info.page_number),
            ))

        recipe = Recipe(
            source=self._source,
            print=self._options,
            pages=tuple(pages),
            shop_id=self._shop_id,
        )
        logger.debug("Generated recipe with %d pages", len(pages))
        return recipe

    def to_json(self) -> str:
        return self.generate().to_json()

    def validate(self) -> ValidationResult:
        """Check the current state without generating or repairing anything."""
        return self.validator.validate(self._source, self.pages, self.store, self._options)

    def summary(self) -> dict[str, Any]:
        included = self.pages.get_included()
        return {
            "total_pages": self.pages.total_pages,
            "included_pages": len(included),
            "edited_pages": sum(1 for p in included if self.store.is_edited(p.page_number)),
            "print_settings": (
                f"{self._options.paper_size}, {self._options.color_mode.value}, "
                f"{self._options.copies} {'copy' if self._options.copies == 1 else 'copies'}"
            ),
        }
