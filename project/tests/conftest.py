# tests/conftest.py
# -----------------------------------------------------------------------
# Shared fixtures: a throwaway asset tree laid out exactly like ./assets.
#
# The Roboto files are copies of the Bitstream Vera TTFs that ship with
# reportlab, and the logo is a small JPEG drawn with Pillow, so the
# suite never depends on the real brand assets being checked out.
# -----------------------------------------------------------------------

import os
import shutil
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
import reportlab
from PIL import Image as PILImage

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from report_engine.assets import load_font_family

_VERA_FILES = {
    "Regular":    "Vera.ttf",
    "Bold":       "VeraBd.ttf",
    "Italic":     "VeraIt.ttf",
    "BoldItalic": "VeraBI.ttf",
}


def make_assets(root: Path) -> SimpleNamespace:
    """Create root/assets/Roboto/*.ttf and root/assets/bipa-logo.jpg."""
    font_dir = root / "assets" / "Roboto"
    font_dir.mkdir(parents=True, exist_ok=True)
    vera_dir = Path(reportlab.__file__).resolve().parent / "fonts"
    for suffix, name in _VERA_FILES.items():
        shutil.copyfile(vera_dir / name, font_dir / f"Roboto-{suffix}.ttf")

    logo = root / "assets" / "bipa-logo.jpg"
    PILImage.new("RGB", (400, 120), (0, 206, 120)).save(logo, "JPEG")
    return SimpleNamespace(root=root, font_dir=font_dir, logo=logo)


@pytest.fixture(scope="session")
def report_assets(tmp_path_factory):
    return make_assets(tmp_path_factory.mktemp("report"))


@pytest.fixture(scope="session", autouse=True)
def registered_fonts(report_assets):
    """Paragraphs need the family registered before they can be built."""
    return load_font_family(report_assets.font_dir)
