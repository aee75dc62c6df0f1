"""
Configuration and logging tests

Usage:
    uv run pytest tests/test_08_config.py -v -s
"""

import sys
from pathlib import Path

import pytest
from loguru import logger

from brandforge_editor.core.config import PathSettings, PreviewSettings, Settings
from brandforge_editor.core.log import setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.preview.width == 640 and settings.preview.height == 360
        assert settings.export.width == 1280 and settings.export.height == 720
        assert settings.export.video_codec == "libx264"
        assert settings.overlay.default_duration == 3.0
        assert settings.overlay.default_text == "Your Text Here"

    def test_yaml_round_trip(self, temp_dir: Path, test_settings: Settings):
        path = temp_dir / "config" / "config.yaml"

        test_settings.to_yaml(path)
        loaded = Settings.from_yaml(path)

        assert loaded.preview.width == 64
        assert loaded.export.fps == 24
        assert loaded.paths.temp_dir == test_settings.paths.temp_dir
        assert loaded.debug is True

    def test_missing_yaml_gives_defaults(self, temp_dir: Path):
        assert Settings.from_yaml(temp_dir / "nope.yaml").export.crf == 23

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BRANDFORGE_DEBUG", "true")
        monkeypatch.setenv("PREVIEW_WIDTH", "320")

        assert Settings().debug is True
        assert PreviewSettings().width == 320

    def test_ensure_dirs(self, temp_dir: Path):
        paths = PathSettings(blob_dir=temp_dir / "a" / "blobs", temp_dir=temp_dir / "b" / "temp")

        paths.ensure_dirs()

        assert paths.blob_dir.is_dir() and paths.temp_dir.is_dir()


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestLogging:
    def test_debug_level(self, restore_logger, capsys: pytest.CaptureFixture):
        setup_logging(debug=True)
        logger.debug("decoder ready")
        setup_logging(debug=False)
        logger.debug("hidden")
        logger.info("export done")

        err = capsys.readouterr().err
        assert "decoder ready" in err
        assert "hidden" not in err
        assert "export done" in err


class TestPackaging:
    def test_project_metadata(self):
        tomllib = pytest.importorskip("tomllib")
        pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"

        with open(pyproject, "rb") as f:
            project = tomllib.load(f)["project"]

        assert project["name"] == "brandforge-editor"
        assert "readme" not in project
        assert "pillow>=10.1" in project["dependencies"]
