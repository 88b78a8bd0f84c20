"""Tests for pdfprep.config module."""

import pytest
import yaml

from pdfprep.config import (
    ColorMode,
    EditScript,
    PrintQuality,
    PrintSettings,
    SessionConfig,
    load_config,
    load_edit_script,
    parse_edit,
    parse_edit_script,
    parse_print_settings,
    parse_session_config,
)
from pdfprep.edits import CropEdit, ResetEdit, RotateEdit, ScaleEdit, TranslateEdit
from pdfprep.exceptions import ConfigError
from pdfprep.model import Box


class TestParseSessionConfig:
    """Test session configuration parsing."""

    def test_minimal(self, minimal_config_dict):
        config = parse_session_config(minimal_config_dict)
        assert config == SessionConfig()
        assert config.preview.cache_size == 20
        assert config.thumbnails.cache_size == 100
        assert config.background.enabled is True

    def test_full(self, full_config_dict):
        config = parse_session_config(full_config_dict)
        assert config.preview.width == 640
        assert config.thumbnails.quality == 80
        assert config.background.enabled is False
        assert config.background.max_file_size_mb == 5
        assert config.print.paper_size == "Letter"
        assert config.print.color_mode == ColorMode.GRAYSCALE
        assert config.print.quality == PrintQuality.HIGH
        assert config.print.pages_per_sheet == 2
        assert config.shop_id == "shop-42"

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError, match="YAML dictionary"):
            parse_session_config(["preview"])

    def test_section_not_a_mapping(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_session_config({"preview": 5})
        assert exc_info.value.field == "preview"

    def test_negative_width(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_session_config({"preview": {"width": -1}})
        assert exc_info.value.field == "preview.width"

    def test_quality_out_of_range(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_session_config({"thumbnails": {"quality": 100}})
        assert "Suggestion:" in str(exc_info.value)


class TestParsePrintSettings:
    """Test print option parsing."""

    def test_defaults(self):
        assert parse_print_settings({}) == PrintSettings()

    def test_invalid_color_mode(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_print_settings({"color_mode": "sepia"})
        assert exc_info.value.field == "print.color_mode"
        assert "grayscale" in exc_info.value.suggestion

    def test_invalid_paper_size(self):
        with pytest.raises(ConfigError, match="paper size"):
            parse_print_settings({"paper_size": "B5"})

    def test_invalid_pages_per_sheet(self):
        with pytest.raises(ConfigError, match="pages per sheet"):
            parse_print_settings({"pages_per_sheet": 3})

    def test_zero_copies(self):
        with pytest.raises(ConfigError):
            parse_print_settings({"copies": 0})

    def test_duplex_must_be_bool(self):
        with pytest.raises(ConfigError):
            parse_print_settings({"duplex": "yes"})

    def test_to_dict_uses_recipe_names(self):
        data = PrintSettings(duplex=True, copies=2).to_dict()
        assert data == {
            "paperSize": "A4",
            "colorMode": "color",
            "duplex": True,
            "copies": 2,
            "pagesPerSheet": 1,
            "quality": "normal",
        }


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load_full(self, full_config_file):
        config = load_config(full_config_file)
        assert config.print.copies == 3

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_config(path) == SessionConfig()

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "nope.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("preview: [unclosed")
        with pytest.raises(ConfigError, match="Could not parse"):
            load_config(path)


class TestParseEdit:
    """Test single edit entries."""

    def test_rotate(self):
        assert parse_edit("rotate", -90) == RotateEdit(-90)

    def test_rotate_not_multiple_of_90(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_edit("rotate", 45, step_idx=2)
        assert exc_info.value.field == "edits[2].rotate"

    def test_crop(self):
        edit = parse_edit("crop", {"x": 0.1, "y": 0.2, "width": 0.3, "height": 0.4})
        assert edit == CropEdit(Box(0.1, 0.2, 0.3, 0.4))

    def test_crop_none_clears(self):
        assert parse_edit("crop", None) == CropEdit(None)

    def test_crop_unknown_field(self):
        with pytest.raises(ConfigError, match="Unknown crop fields: left"):
            parse_edit("crop", {"left": 0.1})

    def test_crop_not_numeric(self):
        with pytest.raises(ConfigError, match="numbers"):
            parse_edit("crop", {"x": "abc"})

    def test_scale(self):
        assert parse_edit("scale", 150) == ScaleEdit(150.0)

    def test_scale_not_numeric(self):
        with pytest.raises(ConfigError):
            parse_edit("scale", "big")

    def test_translate(self):
        assert parse_edit("translate", {"dx": 0.1}) == TranslateEdit(0.1, 0.0)

    def test_reset(self):
        assert parse_edit("reset", True) == ResetEdit()

    def test_unknown_edit(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_edit("flip", True)
        assert "rotate" in exc_info.value.suggestion


class TestParseEditScript:
    """Test edit script parsing."""

    def test_full_script(self, edit_script_dict):
        script = parse_edit_script(edit_script_dict)
        assert len(script.steps) == 3
        assert script.steps[0].pages == "1-2"
        assert script.steps[0].commands == [RotateEdit(90)]
        assert script.steps[1].fit_crop_to_page is True
        assert script.steps[2].commands == [ScaleEdit(150.0), TranslateEdit(0.1, 0.0)]
        assert script.order == [3, 1, 2]
        assert script.exclude == "even"

    def test_empty_script(self):
        assert parse_edit_script({}) == EditScript()

    def test_step_without_pages(self):
        with pytest.raises(ConfigError, match="missing 'pages'"):
            parse_edit_script({"edits": [{"rotate": 90}]})

    def test_edits_not_a_list(self):
        with pytest.raises(ConfigError):
            parse_edit_script({"edits": {"pages": 1}})

    def test_order_must_be_integers(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_edit_script({"order": ["1", 2]})
        assert exc_info.value.field == "order"

    def test_apply_to_all(self):
        assert parse_edit_script({"apply_to_all": 2}).apply_to_all == 2

    def test_apply_to_all_invalid(self):
        with pytest.raises(ConfigError):
            parse_edit_script({"apply_to_all": 0})

    def test_reset_false_is_skipped(self):
        script = parse_edit_script({"edits": [{"pages": 1, "reset": False}]})
        assert script.steps[0].commands == []

    def test_load_edit_script(self, edit_script_file):
        script = load_edit_script(edit_script_file)
        assert len(script.steps) == 3

    def test_load_edit_script_missing(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_edit_script(temp_dir / "missing.yaml")

    def test_load_edit_script_not_a_mapping(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text(yaml.dump([1, 2, 3]))
        with pytest.raises(ConfigError):
            load_edit_script(path)
