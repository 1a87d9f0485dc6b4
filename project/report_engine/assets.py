# assets.py
# ------------------------------------------------------------------
# Loading of the on-disk assets the report depends on: the TrueType
# font family and the header logo.
#
# Both are resolved from fixed relative paths (see constants.py) and
# are loaded before any page is laid out, so a missing file stops the
# run before a single byte of output exists.
# ------------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import Image

from report_engine.constants import FONT_DIR, FONT_FAMILY, LOGO_PATH, LOGO_SCALE

_logger = logging.getLogger(__name__)

# File suffix for each face of a family, e.g. Roboto-BoldItalic.ttf
_FACE_SUFFIXES = (
    ("normal",     "Regular"),
    ("bold",       "Bold"),
    ("italic",     "Italic"),
    ("boldItalic", "BoldItalic"),
)


class ReportAssetError(Exception):
    """Raised when a font or image required by the report cannot be loaded."""
    def __init__(self, path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Report asset unavailable {self.path}: {reason}")


@dataclass(frozen=True)
class FontFamily:
    """Registered reportlab face names for one font family."""
    name: str
    faces: Tuple[str, ...]    # Regular, Bold, Italic, BoldItalic

    @property
    def normal(self) -> str:
        return self.faces[0]


@dataclass(frozen=True)
class Logo:
    path: Path
    width: float
    height: float

    def flowable(self) -> Image:
        img = Image(str(self.path), width=self.width, height=self.height)
        img.hAlign = "LEFT"
        return img


def face_name(suffix: str = "Regular", family: str = FONT_FAMILY) -> str:
    """Registered name of one face: Roboto, Roboto-Bold, Roboto-BoldItalic..."""
    return family if suffix == "Regular" else f"{family}-{suffix}"


def load_font_family(font_dir=FONT_DIR, family: str = FONT_FAMILY) -> FontFamily:
    """
    Register ``{family}-Regular/Bold/Italic/BoldItalic.ttf`` from *font_dir*
    with reportlab and return the registered face names.

    Raises ReportAssetError if any of the four files is missing or is not
    a readable TrueType font.
    """
    font_dir = Path(font_dir)
    faces = {}
    for role, suffix in _FACE_SUFFIXES:
        path = font_dir / f"{family}-{suffix}.ttf"
        if not path.is_file():
            raise ReportAssetError(path, "font file not found")
        name = face_name(suffix, family)
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except (TTFError, OSError) as exc:
            raise ReportAssetError(path, str(exc)) from exc
        _logger.debug("Registered font face %s from %s", name, path)
        faces[role] = name

    pdfmetrics.registerFontFamily(family, **faces)
    return FontFamily(name=family, faces=tuple(faces.values()))


def load_logo(path=LOGO_PATH, scale: float = LOGO_SCALE,
              max_width: Optional[float] = None) -> Logo:
    """
    Read the logo's native size and scale it by *scale*. When *max_width*
    is given the logo is shrunk further (aspect preserved) to fit it.
    """
    path = Path(path)
    if not path.is_file():
        raise ReportAssetError(path, "image file not found")
    try:
        iw, ih = ImageReader(str(path)).getSize()
    except (OSError, ValueError) as exc:
        raise ReportAssetError(path, str(exc)) from exc

    width, height = iw * scale, ih * scale
    if max_width and width > max_width:
        shrink = max_width / width
        width, height = width * shrink, height * shrink
        _logger.debug("Logo %s shrunk by %.2f to fit %.1fpt column", path, shrink, max_width)
    return Logo(path=path, width=width, height=height)
