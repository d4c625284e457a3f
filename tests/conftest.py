"""
Shared fixtures.
"""

from pathlib import Path

import pytest

from ankicard.config import Settings, init_settings, reset_settings


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary working directory."""
    return tmp_path


@pytest.fixture
def settings(temp_dir: Path):
    """Settings with a local template and no environment influence."""
    template = temp_dir / "index.html"
    template.write_text("<html></html>")

    reset_settings()
    current = init_settings(Settings(
        log_level="WARNING",
        chrome_path=None,
        chrome_args=[],
        timeout_ms=60000,
        template_path=template,
    ))
    yield current
    reset_settings()


@pytest.fixture
def csv_files(temp_dir: Path) -> tuple[Path, Path]:
    """Two small CSV files."""
    a = temp_dir / "a.csv"
    a.write_text("dog,Hund\ncat,Katze\n")
    b = temp_dir / "b.csv"
    b.write_text("bird,Vogel\n")
    return a, b
