"""Pre-export validation for pdfprep.

Checks the document state a recipe would be built from and reports every
problem at once instead of failing on the first. Nothing is repaired.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pdfprep.constants import CROP_TOLERANCE, MAX_SCALE, MIN_SCALE, PAGES_PER_SHEET, ROTATE_ANGLES
from pdfprep.exceptions import RecipeError

if TYPE_CHECKING:
    from pdfprep.config import PrintSettings
    from pdfprep.recipe import RecipeSource
    from pdfprep.state.metadata import MetadataStore
    from pdfprep.state.pages import PageState


@dataclass
class ValidationResult:
    """Result of validation.

    Attributes:
        valid: True if no errors were found
        errors: List of error messages (block export)
        warnings: List of warning messages (informational)
    """

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error and mark result as invalid."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (does not affect validity)."""
        self.warnings.append(message)

    def merge(self, other: ValidationResult) -> None:
        """Merge another validation result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.valid:
            self.valid = False

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


class RecipeValidator:
    """Validates the state a recipe is generated from.

    Performs three phases:
    1. Structural: a source is registered and at least one page is included
    2. Pages: every included page has in-bounds crop, scale and rotation
    3. Print: the print options are consistent

    Example:
        validator = RecipeValidator()
        result = validator.validate(source, pages, store, options)
        if not result.valid:
            for error in result.errors:
                print(f"Error: {error}")
    """

    def validate(
        self,
        source: RecipeSource | None,
        pages: PageState,
        store: MetadataStore,
        options: PrintSettings,
    ) -> ValidationResult:
        result = ValidationResult()
        result.merge(self._validate_structure(source, pages))
        result.merge(self._validate_pages(pages, store))
        result.merge(self._validate_print(options))
        return result

    def validate_or_raise(
        self,
        source: RecipeSource | None,
        pages: PageState,
        store: MetadataStore,
        options: PrintSettings,
    ) -> None:
        """Validate and raise RecipeError listing every error.

        Raises:
            RecipeError: If validation fails
        """
        result = self.validate(source, pages, store, options)
        if not result.valid:
            raise RecipeError(f"Recipe validation failed: {'; '.join(result.errors)}")

    def _validate_structure(self, source: RecipeSource | None, pages: PageState) -> ValidationResult:
        result = ValidationResult()
        if source is None:
            result.add_error("Source file info not set")
        if pages.included_count <= 0:
            result.add_error("No pages included")
        return result

    def _validate_pages(self, pages: PageState, store: MetadataStore) -> ValidationResult:
        result = ValidationResult()
        limit = 1 + CROP_TOLERANCE

        for page in pages.get_included():
            number = page.page_number
            transforms = store.get_transforms(number)

            crop = transforms.crop
            if crop is not None and (
                crop.x < 0
                or crop.y < 0
                or crop.width <= 0
                or crop.height <= 0
                or crop.right > limit
                or crop.bottom > limit
            ):
                result.add_error(f"Page {number}: Invalid crop bounds")

            if not MIN_SCALE <= transforms.scale <= MAX_SCALE:
                result.add_error(f"Page {number}: Scale out of range ({MIN_SCALE}-{MAX_SCALE}%)")

            if transforms.rotation not in ROTATE_ANGLES:
                result.add_error(f"Page {number}: Invalid rotation {transforms.rotation}")

            if store.get_fit_crop_to_page(number) and crop is None:
                result.add_warning(f"Page {number}: fit crop to page is set but the page has no crop")

        for number in pages.get_excluded():
            if store.is_edited(number):
                result.add_warning(f"Page {number} is excluded but has edits")

        return result

    def _validate_print(self, options: PrintSettings) -> ValidationResult:
        result = ValidationResult()
        if options.copies < 1:
            result.add_error(f"Copies must be at least 1, got {options.copies}")
        if options.pages_per_sheet not in PAGES_PER_SHEET:
            result.add_error(
                f"Invalid pages per sheet: {options.pages_per_sheet}. "
                f"Valid values: {', '.join(str(n) for n in PAGES_PER_SHEET)}"
            )
        return result
