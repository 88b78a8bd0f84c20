"""Tests for pdfprep.validation module."""

import pytest

from pdfprep.config import PrintSettings
from pdfprep.exceptions import RecipeError
from pdfprep.model import Box, PageInfo
from pdfprep.recipe import RecipeSource
from pdfprep.state import MetadataStore, PageState
from pdfprep.validation import RecipeValidator, ValidationResult

SOURCE = RecipeSource(file_name="doc.pdf", file_size=1024, file_type="application/pdf", total_pages=3)


@pytest.fixture
def document():
    store = MetadataStore()
    pages = PageState()
    infos = [PageInfo(n, 612, 792) for n in (1, 2, 3)]
    for info in infos:
        store.init_page(info.page_number, info.width, info.height)
    pages.init(infos, "doc")
    return store, pages


class TestValidationResult:
    """Test ValidationResult dataclass."""

    def test_default_valid(self):
        result = ValidationResult()
        assert result.valid is True
        assert result.errors == []
        assert result.warnings == []

    def test_add_error(self):
        result = ValidationResult()
        result.add_error("Something wrong")
        assert result.valid is False
        assert "Something wrong" in result.errors

    def test_add_warning_keeps_valid(self):
        result = ValidationResult()
        result.add_warning("Heads up")
        assert result.valid is True

    def test_merge(self):
        a = ValidationResult()
        b = ValidationResult()
        b.add_error("e")
        b.add_warning("w")
        a.merge(b)
        assert a.valid is False
        assert a.errors == ["e"]
        assert a.warnings == ["w"]

    def test_to_dict(self):
        result = ValidationResult()
        result.add_warning("w")
        assert result.to_dict() == {"valid": True, "errors": [], "warnings": ["w"]}


class TestRecipeValidator:
    """Test pre-export validation."""

    def test_clean_document(self, document):
        store, pages = document
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert result.valid
        assert result.warnings == []

    def test_missing_source(self, document):
        store, pages = document
        result = RecipeValidator().validate(None, pages, store, PrintSettings())
        assert "Source file info not set" in result.errors

    def test_no_pages_included(self, document):
        store, pages = document
        pages.exclude_all()
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert result.valid is False
        assert any("no pages included" in e.lower() for e in result.errors)

    def test_scale_out_of_range(self, document):
        store, pages = document
        store.set_scale(2, 600)
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert result.valid is False
        assert "Page 2: Scale out of range (10-500%)" in result.errors

    def test_invalid_crop(self, document):
        store, pages = document
        store.set_crop(1, Box(0.6, 0.0, 0.6, 0.5))
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert "Page 1: Invalid crop bounds" in result.errors

    def test_crop_within_tolerance(self, document):
        store, pages = document
        store.set_crop(1, Box(0.5, 0.0, 0.505, 0.5))
        assert RecipeValidator().validate(SOURCE, pages, store, PrintSettings()).valid

    def test_invalid_rotation(self, document):
        store, pages = document
        store.set_rotation(3, 45)
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert any("Invalid rotation" in e for e in result.errors)

    def test_excluded_page_not_checked(self, document):
        store, pages = document
        store.set_scale(2, 600)
        pages.exclude_page(2)
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert result.valid
        assert "Page 2 is excluded but has edits" in result.warnings

    def test_fit_without_crop_warns(self, document):
        store, pages = document
        store.set_fit_crop_to_page(1, True)
        result = RecipeValidator().validate(SOURCE, pages, store, PrintSettings())
        assert result.valid
        assert len(result.warnings) == 1

    def test_bad_print_options(self, document):
        store, pages = document
        options = PrintSettings(copies=0, pages_per_sheet=3)
        result = RecipeValidator().validate(SOURCE, pages, store, options)
        assert len(result.errors) == 2

    def test_all_errors_reported(self, document):
        store, pages = document
        store.set_scale(1, 5)
        store.set_scale(3, 900)
        result = RecipeValidator().validate(None, pages, store, PrintSettings())
        assert len(result.errors) == 3

    def test_validate_or_raise(self, document):
        store, pages = document
        pages.exclude_all()
        with pytest.raises(RecipeError, match="No pages included"):
            RecipeValidator().validate_or_raise(SOURCE, pages, store, PrintSettings())
