# builder.py
# ------------------------------------------------------------------
# Report building blocks.
#
# Every helper here is pure: it takes plain data (strings, RGB
# triples, alignment, font size) and returns an immutable layout node.
# Nodes are only turned into reportlab flowables when the document is
# rendered, which keeps the story inspectable in tests.
#
#   StyledText   one run of text with color / size / weight / alignment
#   Row          cells laid out horizontally, 2mm vertical padding
#   Section      title, subtitle and body stacked vertically
#   FramedTable  rows (and separator rows) inside an outer frame only
# ------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from report_engine.assets import face_name
from report_engine.constants import (
    BIPA_GREEN, BLACK, BTC_BLUE, FRAME_INSET, GOLD, GRAY3,
    GRAY4, LINE_SPACING, ROW_PADDING, ROW_W, SECTION_GAP,
)

RGB = Tuple[int, int, int]

_PAIR_GAP = "&nbsp;" * 4


class Alignment(Enum):
    LEFT = TA_LEFT
    CENTER = TA_CENTER
    RIGHT = TA_RIGHT


@dataclass(frozen=True)
class StyledText:
    content: str
    color: RGB = BLACK
    font_size: int = 10
    bold: bool = False
    alignment: Alignment = Alignment.LEFT


@dataclass(frozen=True)
class SectionTheme:
    """Accent palette of a titled section."""
    name: str
    title_color: RGB
    title_size: int
    subtitle_color: RGB
    subtitle_size: int = 12


THEMES: Dict[str, SectionTheme] = {
    # Identification blocks: green title over a dark subtitle.
    "primary":     SectionTheme("primary", title_color=BIPA_GREEN, title_size=12, subtitle_color=BLACK),
    "crypto-blue": SectionTheme("crypto-blue", title_color=BLACK, title_size=14, subtitle_color=BTC_BLUE),
    "gold":        SectionTheme("gold", title_color=BLACK, title_size=14, subtitle_color=GOLD),
}


# ─────────────────────────────────────────────────────────────────
# PRIMITIVES
# ─────────────────────────────────────────────────────────────────
def rl_color(rgb: RGB) -> colors.Color:
    r, g, b = rgb
    return colors.Color(r / 255.0, g / 255.0, b / 255.0)


def hex_color(rgb: RGB) -> str:
    return "#%02x%02x%02x" % tuple(rgb)


def paragraph_style(font_size, color: RGB = BLACK, bold=False,
                    alignment: Alignment = Alignment.LEFT) -> ParagraphStyle:
    return ParagraphStyle(
        f"st{font_size}{'b' if bold else ''}{alignment.name[0]}",
        fontName=face_name("Bold" if bold else "Regular"),
        fontSize=font_size,
        leading=font_size * LINE_SPACING,
        textColor=rl_color(color),
        alignment=alignment.value,
    )


def styled_paragraph(text: StyledText) -> Paragraph:
    style = paragraph_style(text.font_size, text.color, text.bold, text.alignment)
    return Paragraph(escape(text.content), style)


def labelled_text(pairs: Sequence[Tuple[str, str]], font_size: int = 12,
                  label_color: RGB = GRAY4, value_color: RGB = BLACK) -> Paragraph:
    """
    One paragraph of ``Label: value`` runs, e.g. ``CNPJ: 13.140.088/0001-99``.
    Labels are drawn in *label_color*, values in *value_color*; consecutive
    pairs are separated by four non-breaking spaces.
    """
    runs = [
        f'<font color="{hex_color(label_color)}">{escape(label)}</font> {escape(value)}'
        for label, value in pairs
    ]
    return Paragraph(_PAIR_GAP.join(runs), paragraph_style(font_size, value_color))


def to_flowable(node: Any):
    """Layout nodes render themselves; reportlab flowables pass through."""
    render = getattr(node, "flowable", None)
    return render() if callable(render) else node


# ─────────────────────────────────────────────────────────────────
# ROW
# ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Row:
    cells: Tuple[StyledText, ...]
    width: float = ROW_W

    def flowable(self) -> Table:
        n = len(self.cells)
        tbl = Table([[styled_paragraph(c) for c in self.cells]], colWidths=[self.width / n] * n)
        tbl.setStyle(TableStyle([
            ("TOPPADDING",    (0, 0), (-1, -1), ROW_PADDING),
            ("BOTTOMPADDING", (0, 0), (-1, -1), ROW_PADDING),
            ("LEFTPADDING",   (0, 0), (-1, -1), 0),
            ("RIGHTPADDING",  (0, 0), (-1, -1), 0),
            ("VALIGN",        (0, 0), (-1, -1), "MIDDLE"),
        ]))
        return tbl


def build_row(cells: Sequence[StyledText], width: float = ROW_W) -> Row:
    return Row(cells=tuple(cells), width=width)


# ─────────────────────────────────────────────────────────────────
# SECTION
# ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Section:
    title: Optional[str]
    subtitle: str
    theme: SectionTheme
    body: Any
    width: float = ROW_W

    def parts(self) -> list:
        """Title (unless None), subtitle and body, in that order."""
        out = []
        if self.title is not None:
            out.append(styled_paragraph(StyledText(
                self.title, self.theme.title_color, self.theme.title_size, bold=True)))
        out.append(styled_paragraph(StyledText(
            self.subtitle, self.theme.subtitle_color, self.theme.subtitle_size, bold=True)))
        out.append(to_flowable(self.body))
        return out

    def flowable(self) -> Table:
        parts = self.parts()
        tbl = Table([[p] for p in parts], colWidths=[self.width])
        tbl.setStyle(TableStyle([
            ("LEFTPADDING",   (0, 0), (-1, -1), 0),
            ("RIGHTPADDING",  (0, 0), (-1, -1), 0),
            ("TOPPADDING",    (0, 0), (-1, -1), 0),
            ("BOTTOMPADDING", (0, 0), (-1, -1), SECTION_GAP),
            ("BOTTOMPADDING", (0, -1), (-1, -1), 0),
            ("VALIGN",        (0, 0), (-1, -1), "TOP"),
        ]))
        return tbl


def build_titled_section(title: Optional[str], subtitle: str, theme, body,
                         width: float = ROW_W) -> Section:
    """
    Stack a bold title, a bold subtitle in the theme's accent color, then
    *body*. *theme* is a SectionTheme or one of the THEMES keys. A title of
    None leaves the title line out; an empty string keeps an empty line.
    """
    if isinstance(theme, str):
        theme = THEMES[theme]
    return Section(title=title, subtitle=subtitle, theme=theme, body=body, width=width)


# ─────────────────────────────────────────────────────────────────
# FRAMED TABLE
# ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SeparatorRow:
    """Zero-height row used to open a visual gap between table groups."""

    def flowable(self) -> Spacer:
        return Spacer(1, 0)


@dataclass(frozen=True)
class FramedTable:
    rows: Tuple[Any, ...]
    padding: Tuple[float, float]   # (top, bottom) around every non-separator row
    frame_color: RGB = GRAY3
    frame_width: float = 0.75

    @property
    def separator_count(self) -> int:
        return sum(1 for r in self.rows if isinstance(r, SeparatorRow))

    def flowable(self) -> Table:
        top, bottom = self.padding
        tbl = Table([[to_flowable(r)] for r in self.rows], colWidths=[ROW_W + 2 * FRAME_INSET])
        cmds = [
            ("BOX",          (0, 0), (-1, -1), self.frame_width, rl_color(self.frame_color)),
            ("LEFTPADDING",  (0, 0), (-1, -1), FRAME_INSET),
            ("RIGHTPADDING", (0, 0), (-1, -1), FRAME_INSET),
            ("VALIGN",       (0, 0), (-1, -1), "TOP"),
        ]
        for i, row in enumerate(self.rows):
            pad_t, pad_b = (0, 0) if isinstance(row, SeparatorRow) else (top, bottom)
            cmds.append(("TOPPADDING",    (0, i), (-1, i), pad_t))
            cmds.append(("BOTTOMPADDING", (0, i), (-1, i), pad_b))
        tbl.setStyle(TableStyle(cmds))
        return tbl


def build_framed_table(rows: Sequence[Any], padding, frame_color: RGB = GRAY3) -> FramedTable:
    """
    Wrap each row in *padding* and draw an outer frame only. *padding* is
    either a single value applied above and below, or a (top, bottom) pair.
    """
    if isinstance(padding, (int, float)):
        padding = (padding, padding)
    return FramedTable(rows=tuple(rows), padding=tuple(padding), frame_color=frame_color)


def add_separator_row(table: FramedTable) -> FramedTable:
    return replace(table, rows=table.rows + (SeparatorRow(),))
