"""Shared fixtures for pdfprep tests."""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from pdfprep.config import BackgroundConfig, SessionConfig
from pdfprep.rendering.mock import MockRasterizer
from pdfprep.session import EditorSession
from pdfprep.state.metadata import MetadataStore


def write_blank_pdf(path: Path, sizes) -> Path:
    """Write a PDF with one blank page per (width, height) pair."""
    from pypdf import PdfWriter

    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    with open(path, "wb") as f:
        writer.write(f)
    return path


# === Path/Directory Fixtures ===

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# === PDF Fixtures ===

@pytest.fixture
def temp_pdf(temp_dir):
    """Create a temporary single-page PDF for testing."""
    return write_blank_pdf(temp_dir / "test.pdf", [(612, 792)])  # Letter size


@pytest.fixture
def temp_multi_page_pdf(temp_dir):
    """Create a temporary 8-page PDF for testing."""
    return write_blank_pdf(temp_dir / "multi_page.pdf", [(612, 792)] * 8)


@pytest.fixture
def temp_mixed_pdf(temp_dir):
    """Portrait, landscape, portrait."""
    return write_blank_pdf(temp_dir / "mixed.pdf", [(612, 792), (792, 612), (595, 842)])


# === Store Fixtures ===

@pytest.fixture
def store():
    """A metadata store with eight letter-size pages."""
    s = MetadataStore()
    for page_number in range(1, 9):
        s.init_page(page_number, 612, 792)
    return s


# === Rasterizer / Session Fixtures ===

@pytest.fixture
def mock_rasterizer():
    """Mock rasterizer with eight letter-size pages."""
    return MockRasterizer(pages=[(612, 792)] * 8)


@pytest.fixture
def quiet_config():
    """Session config with background rendering disabled and small previews."""
    config = SessionConfig()
    config.background = BackgroundConfig(enabled=False)
    config.preview.width = 200
    config.preview.height = 250
    return config


@pytest.fixture
def loaded_session(mock_rasterizer, quiet_config, temp_multi_page_pdf):
    """A session with an 8-page document already loaded."""
    session = EditorSession(mock_rasterizer, quiet_config)
    asyncio.run(session.load_document(temp_multi_page_pdf))
    yield session
    session.destroy()


# === Config Fixtures ===

@pytest.fixture
def minimal_config_dict():
    """Minimal valid session configuration dictionary."""
    return {"version": 1}


@pytest.fixture
def full_config_dict():
    """Session configuration dictionary with all options."""
    return {
        "version": 1,
        "preview": {"width": 640, "height": 800, "cache_size": 10},
        "thumbnails": {"width": 100, "height": 140, "cache_size": 50, "quality": 80},
        "background": {"enabled": False, "max_file_size_mb": 5},
        "print": {
            "paper_size": "Letter",
            "color_mode": "grayscale",
            "duplex": True,
            "copies": 3,
            "pages_per_sheet": 2,
            "quality": "high",
        },
        "destination": {"shop_id": "shop-42"},
    }


@pytest.fixture
def edit_script_dict():
    """Edit script touching crop, rotation, scale, order and exclusion."""
    return {
        "edits": [
            {"pages": "1-2", "rotate": 90},
            {"pages": 3, "crop": {"x": 0.1, "y": 0.1, "width": 0.5, "height": 0.5}, "fit_crop_to_page": True},
            {"pages": "last", "scale": 150, "translate": {"dx": 0.1, "dy": 0}},
        ],
        "order": [3, 1, 2],
        "exclude": "even",
    }


@pytest.fixture
def full_config_file(temp_dir, full_config_dict):
    """Create a temporary full config file."""
    config_path = temp_dir / "session.yaml"
    with open(config_path, "w") as f:
        yaml.dump(full_config_dict, f)
    return config_path


@pytest.fixture
def edit_script_file(temp_dir, edit_script_dict):
    """Create a temporary edit script file."""
    script_path = temp_dir / "edits.yaml"
    with open(script_path, "w") as f:
        yaml.dump(edit_script_dict, f)
    return script_path

# === Logging ===

@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers installed by setup_logging so tests do not leak streams."""
    yield
    logger = logging.getLogger("pdfprep")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
