"""Integration tests for pdfprep CLI."""

import json
import subprocess
import sys

import pytest
import yaml


def run_cli(*args):
    return subprocess.run(
        [sys.executable, "-m", "pdfprep.cli", *args],
        capture_output=True,
        text=True,
    )


@pytest.mark.integration
class TestCLIIntegration:
    """Test CLI as subprocess."""

    def test_help_flag(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()

    def test_version_flag(self):
        result = run_cli("--version")
        assert result.returncode == 0
        assert "pdfprep" in result.stdout

    def test_recipe_on_stdout(self, temp_multi_page_pdf):
        result = run_cli("-i", str(temp_multi_page_pdf), "--rasterizer", "mock", "-q")
        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert data["source"]["totalPages"] == 8

    def test_full_run(self, temp_dir, temp_mixed_pdf):
        script = temp_dir / "edits.yaml"
        script.write_text(yaml.dump({
            "edits": [
                {"pages": "first", "crop": {"x": 0.1, "y": 0.1, "width": 0.5, "height": 0.5}},
                {"pages": "first", "rotate": 90},
                {"pages": "last", "scale": 1000},
            ],
        }))
        config = temp_dir / "session.yaml"
        config.write_text(yaml.dump({"print": {"pages_per_sheet": 2, "paper_size": "A5"}}))
        output = temp_dir / "job.json"

        result = run_cli(
            "-i", str(temp_mixed_pdf),
            "-c", str(config),
            "-e", str(script),
            "-o", str(output),
            "--thumbnails", str(temp_dir / "thumbs"),
            "--sheets", str(temp_dir / "sheets"),
            "--rasterizer", "mock",
        )
        assert result.returncode == 0, result.stderr

        data = json.loads(output.read_text())
        first = data["pages"][0]["transforms"]
        assert first["rotation"] == 90
        assert first["crop"]["x"] == pytest.approx(0.4)
        assert data["pages"][2]["transforms"]["scale"] == 500
        assert data["print"]["pagesPerSheet"] == 2
        assert len(list((temp_dir / "thumbs").glob("*.jpg"))) == 3
        assert len(list((temp_dir / "sheets").glob("*.png"))) == 2

    def test_validation_failure(self, temp_dir, temp_pdf):
        script = temp_dir / "edits.yaml"
        script.write_text(yaml.dump({"exclude": [1]}))
        result = run_cli("-i", str(temp_pdf), "-e", str(script), "--validate", "--rasterizer", "mock")
        assert result.returncode == 1
        assert "No pages included" in result.stderr

    def test_unreadable_pdf(self, temp_dir):
        bad = temp_dir / "bad.pdf"
        bad.write_text("not a pdf")
        result = run_cli("-i", str(bad), "--rasterizer", "mock")
        assert result.returncode == 1
        assert "Cannot read PDF" in result.stderr
