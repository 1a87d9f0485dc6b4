"""
pdf_export.py
=============
Informe de Rendimentos Financeiro PDF generator.

The document is laid out in a fixed order:
  1.  Header                       – logo beside the report title
  2.  Identificação                – payer and beneficiary
  3.  Rendimentos                  – exclusive-taxation income balances
  --- page break ---
  4.  Custodian identification
  5.  Bens e Direitos 2021         – Bitcoin, then PAX Gold
  --- page break ---
  6.  Bens e Direitos 2020         – Bitcoin, then PAX Gold

Every page after the first carries a centered "Página N" header.
"""

from __future__ import annotations

import io
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from reportlab.platypus import (
    BaseDocTemplate, Frame, PageBreak, PageTemplate, Spacer, Table, TableStyle,
)

from report_engine.assets import FontFamily, Logo, load_font_family, load_logo
from report_engine.builder import (
    THEMES, Alignment, StyledText, add_separator_row, build_framed_table,
    build_row, build_titled_section, labelled_text, rl_color, styled_paragraph, to_flowable,
)
from report_engine.constants import (
    BALANCE_PADDING, BIPA_GREEN, BLACK, BLOCK_PADDING, CONTENT_W, FONT_DIR,
    GRAY3, GRAY4, HEADER_H, LINE_SPACING, LOGO_PATH, MARGIN, OUTPUT_PATH,
    PAGE_H, PAGE_W, REPORT_AUTHOR, REPORT_SUBJECT, REPORT_TITLE,
)
from report_engine.holdings import (
    ASSETS, ASSETS_HEADING, BENEFICIARY, CUSTODIAN, INCOME_BALANCES,
    INCOME_HEADING, INCOME_UNIT, NET_INCOME, PAYER, STATEMENT_YEARS,
    TRANSACTION_COLUMNS, Party, check_totals, format_quantity, statement_date,
    statement_total, transactions_for,
)

_logger = logging.getLogger(__name__)

PAGE_HEADER_SIZE = 10


class ReportWriteError(Exception):
    """Raised when the rendered PDF cannot be written to its destination."""
    def __init__(self, path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write report to {self.path}: {reason}")


def _line_break(lines: float = 1, font_size: int = 12) -> Spacer:
    """Vertical gap the height of *lines* lines of body text."""
    return Spacer(1, lines * font_size * LINE_SPACING)


# ─────────────────────────────────────────────────────────────────
# PAGE HEADER
# ─────────────────────────────────────────────────────────────────
def page_header_text(page: int) -> Optional[str]:
    """The header printed on *page*; the first page has none."""
    if page > 1:
        return f"Página {page}"
    return None


def _make_page_decorator(fonts: FontFamily):
    """Returns the canvas callback used for every page."""

    def on_page(canvas, doc):
        text = page_header_text(doc.page)
        if text is None:
            return
        canvas.saveState()
        canvas.setFont(fonts.normal, PAGE_HEADER_SIZE)
        canvas.setFillColor(rl_color(BLACK))
        canvas.drawCentredString(PAGE_W / 2, PAGE_H - MARGIN - PAGE_HEADER_SIZE, text)
        canvas.restoreState()

    return on_page


def _make_page_templates(on_page) -> List[PageTemplate]:
    """
    Page 1 has no header, so its frame starts right under the top margin;
    later pages keep HEADER_H clear above the frame for "Página N".
    """
    body_h = PAGE_H - 2 * MARGIN
    first = PageTemplate(
        id="first",
        frames=[Frame(MARGIN, MARGIN, CONTENT_W, body_h, id="first")],
        onPage=on_page,
        autoNextPageTemplate="later",
    )
    later = PageTemplate(
        id="later",
        frames=[Frame(MARGIN, MARGIN, CONTENT_W, body_h - HEADER_H, id="later")],
        onPage=on_page,
    )
    return [first, later]


# ─────────────────────────────────────────────────────────────────
# SECTION 1: HEADER
# ─────────────────────────────────────────────────────────────────
def _build_header(story, logo: Logo):
    title = styled_paragraph(StyledText(
        REPORT_TITLE, BIPA_GREEN, 14, bold=True, alignment=Alignment.RIGHT))
    header = Table([[logo.flowable(), title]], colWidths=[CONTENT_W / 2, CONTENT_W / 2])
    header.setStyle(TableStyle([
        ("VALIGN",        (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING",   (0, 0), (-1, -1), 0),
        ("RIGHTPADDING",  (0, 0), (-1, -1), 0),
    ]))
    story.append(header)
    story.append(_line_break())
    story.append(styled_paragraph(StyledText(REPORT_SUBJECT, BLACK, 16, bold=True)))


# ─────────────────────────────────────────────────────────────────
# SECTION 2: IDENTIFICATION
# ─────────────────────────────────────────────────────────────────
def _party_section(party: Party):
    return build_titled_section(party.role, party.name, "primary",
                                labelled_text(party.fields))


def _identification_table(*parties: Party):
    table = build_framed_table([_party_section(p) for p in parties], BLOCK_PADDING)
    return add_separator_row(table)


def _build_identification(story):
    story.append(_line_break())
    story.append(_identification_table(PAYER, BENEFICIARY))
    story.append(_line_break())


# ─────────────────────────────────────────────────────────────────
# SECTION 3: RENDIMENTOS
# ─────────────────────────────────────────────────────────────────
def _build_income(story):
    label = dict(color=GRAY4, font_size=10)
    value = dict(color=BLACK, font_size=10, bold=True, alignment=Alignment.RIGHT)

    rows = [build_row([
        StyledText(INCOME_HEADING, BLACK, 12, bold=True),
        StyledText(INCOME_UNIT, GRAY3, 10, alignment=Alignment.RIGHT),
    ])]
    for caption, amount in INCOME_BALANCES:
        rows.append(build_row([StyledText(caption, **label), StyledText(amount, **value)]))

    caption, amount = NET_INCOME
    rows.append(build_row([
        StyledText(caption, BIPA_GREEN, 8),
        StyledText(amount, BIPA_GREEN, 10, bold=True, alignment=Alignment.RIGHT),
    ]))
    story.append(build_framed_table(rows, BALANCE_PADDING))


# ─────────────────────────────────────────────────────────────────
# SECTION 4+: BENS E DIREITOS
# ─────────────────────────────────────────────────────────────────
def _asset_heading(year: int, asset):
    section = build_titled_section(
        ASSETS_HEADING if asset.show_heading else None,
        asset.label,
        asset.theme,
        labelled_text([("Data:", statement_date(year))]),
    )
    return build_framed_table([section], BLOCK_PADDING)


def _transaction_table(year: int, asset):
    accent = THEMES[asset.theme].subtitle_color
    header = StyledText("", GRAY3, 10)
    cell = StyledText("", BLACK, 10)
    total_cell = StyledText("", accent, 10, bold=True)

    def _row(style, values):
        return build_row([replace(style, content=v) for v in values])

    rows = [_row(header, TRANSACTION_COLUMNS)]
    for tx in transactions_for(year, asset.ticker).itertuples(index=False):
        rows.append(_row(cell, [tx.source, format_quantity(tx.quantity, asset.ticker), tx.cost, tx.price]))

    total = statement_total(year, asset.ticker)
    rows.append(_row(total_cell, ["Total", format_quantity(total.quantity, asset.ticker),
                                  total.cost, total.price]))
    return build_framed_table(rows, (0, BALANCE_PADDING))


def _build_assets(story, year: int):
    for asset in ASSETS:
        story.append(_asset_heading(year, asset))
        story.append(_transaction_table(year, asset))


# ─────────────────────────────────────────────────────────────────
# STORY
# ─────────────────────────────────────────────────────────────────
def build_story(logo: Logo) -> List:
    """The full document as an ordered list of layout nodes and flowables."""
    story = []
    _build_header(story, logo)
    _build_identification(story)
    _build_income(story)
    story.append(PageBreak())

    story.append(_identification_table(CUSTODIAN))
    for i, year in enumerate(STATEMENT_YEARS):
        if i:
            story.append(PageBreak())
        _build_assets(story, year)
    return story


# ─────────────────────────────────────────────────────────────────
# MAIN ENTRY POINTS
# ─────────────────────────────────────────────────────────────────
def generate_report_pdf(font_dir=FONT_DIR, logo_path=LOGO_PATH) -> bytes:
    """
    Build and render the report in memory.

    Raises:
        ReportAssetError: the font family or the logo could not be loaded.
            Nothing has been rendered at that point.
    """
    fonts = load_font_family(font_dir)
    logo = load_logo(logo_path, max_width=CONTENT_W / 2)

    check_totals()
    story = build_story(logo)
    _logger.info("Assembled story with %d elements", len(story))

    buf = io.BytesIO()
    doc = BaseDocTemplate(
        buf,
        pagesize=(PAGE_W, PAGE_H),
        leftMargin=MARGIN, rightMargin=MARGIN,
        topMargin=MARGIN, bottomMargin=MARGIN,
        title=REPORT_TITLE,
        author=REPORT_AUTHOR,
        subject=REPORT_SUBJECT,
        creator=REPORT_AUTHOR,
        invariant=1,
    )
    doc.addPageTemplates(_make_page_templates(_make_page_decorator(fonts)))
    doc.build([to_flowable(node) for node in story])
    _logger.info("Rendered %d pages", doc.page)
    return buf.getvalue()


def write_report(output_path=OUTPUT_PATH, font_dir=FONT_DIR, logo_path=LOGO_PATH) -> Path:
    """Render the report and write it to *output_path*, overwriting it."""
    output_path = Path(output_path)
    pdf_bytes = generate_report_pdf(font_dir=font_dir, logo_path=logo_path)
    try:
        output_path.write_bytes(pdf_bytes)
    except OSError as exc:
        raise ReportWriteError(output_path, str(exc)) from exc
    _logger.info("Wrote %d bytes to %s", len(pdf_bytes), output_path)
    return output_path