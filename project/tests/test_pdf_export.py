# tests/test_pdf_export.py
# -----------------------------------------------------------------------
# Tests for pdf_export.py
#
# Two layers:
#   - story structure (build_story), checked without rendering;
#   - end-to-end rendering, checked by extracting text with pypdf.
# -----------------------------------------------------------------------

import io
import os
import sys

import pytest
from pypdf import PdfReader
from reportlab.platypus import PageBreak, Paragraph

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pdf_export import (
    ReportWriteError,
    _make_page_templates,
    build_story,
    generate_report_pdf,
    page_header_text,
    write_report,
)
from report_engine.assets import ReportAssetError, load_logo
from report_engine.builder import FramedTable, Row, Section, SeparatorRow, rl_color
from report_engine.constants import BIPA_GREEN, BTC_BLUE, GOLD, HEADER_H, MARGIN, PAGE_H
from report_engine.holdings import INCOME_HEADING


# ── Helpers ────────────────────────────────────────────────────────────

def _sections(node):
    if not isinstance(node, FramedTable):
        return []
    return [r for r in node.rows if isinstance(r, Section)]


def _first_cell(node):
    if isinstance(node, FramedTable) and node.rows and isinstance(node.rows[0], Row):
        return node.rows[0].cells[0].content
    return None


def _body_text(section):
    body = section.body
    return body.getPlainText() if isinstance(body, Paragraph) else ""


def _index_of(story, predicate):
    return next(i for i, node in enumerate(story) if predicate(node))


def _asset_heading_index(story, label_fragment, year):
    return _index_of(story, lambda n: any(
        label_fragment in s.subtitle and f"31/12/{year}" in _body_text(s) for s in _sections(n)))


def _page_breaks(story, start, stop):
    return sum(1 for node in story[start:stop] if isinstance(node, PageBreak))


@pytest.fixture
def story(report_assets):
    return build_story(load_logo(report_assets.logo))


@pytest.fixture(scope="module")
def rendered(report_assets, tmp_path_factory):
    out = tmp_path_factory.mktemp("out") / "informe.pdf"
    write_report(out, font_dir=report_assets.font_dir, logo_path=report_assets.logo)
    return out


def _page_texts(pdf_bytes_or_path):
    src = io.BytesIO(pdf_bytes_or_path) if isinstance(pdf_bytes_or_path, bytes) else str(pdf_bytes_or_path)
    return [page.extract_text() or "" for page in PdfReader(src).pages]


# ═══════════════════════════════════════════════════════════════════════
# Page header
# ═══════════════════════════════════════════════════════════════════════

class TestPageHeader:
    def test_first_page_has_no_header(self):
        assert page_header_text(1) is None

    @pytest.mark.parametrize("page", [2, 3, 10])
    def test_later_pages(self, page):
        assert page_header_text(page) == f"Página {page}"

    def test_first_page_frame_reaches_top_margin(self):
        first, _ = _make_page_templates(lambda canvas, doc: None)
        (frame,) = first.frames
        assert frame._y1 + frame._height == pytest.approx(PAGE_H - MARGIN)
        assert first.autoNextPageTemplate == "later"

    def test_later_frames_leave_room_for_header(self):
        _, later = _make_page_templates(lambda canvas, doc: None)
        (frame,) = later.frames
        assert frame._y1 + frame._height == pytest.approx(PAGE_H - MARGIN - HEADER_H)


# ═══════════════════════════════════════════════════════════════════════
# Story structure
# ═══════════════════════════════════════════════════════════════════════

class TestStory:
    def test_two_page_breaks_total(self, story):
        assert sum(isinstance(n, PageBreak) for n in story) == 2

    def test_one_break_between_income_and_assets(self, story):
        income = _index_of(story, lambda n: _first_cell(n) == INCOME_HEADING)
        first_assets = _index_of(story, lambda n: any(s.title == "Bens e Direitos" for s in _sections(n)))
        assert income < first_assets
        assert _page_breaks(story, income, first_assets) == 1

    def test_one_break_between_years(self, story):
        last_2021 = _asset_heading_index(story, "PAX Gold - PAXG", 2021)
        first_2020 = _asset_heading_index(story, "Bitcoin - BTC", 2020)
        assert last_2021 < first_2020
        assert _page_breaks(story, last_2021, first_2020) == 1

    def test_asset_block_order(self, story):
        order = [
            _asset_heading_index(story, "Bitcoin - BTC", 2021),
            _asset_heading_index(story, "PAX Gold - PAXG", 2021),
            _asset_heading_index(story, "Bitcoin - BTC", 2020),
            _asset_heading_index(story, "PAX Gold - PAXG", 2020),
        ]
        assert order == sorted(order)

    def test_identification_table(self, story):
        table = _index_of(story, lambda n: len(_sections(n)) == 2)
        node = story[table]
        assert [s.subtitle for s in _sections(node)] == ["Acesso Soluções de Pagamento S.A.", "Felipe Rosa"]
        assert isinstance(node.rows[-1], SeparatorRow)
        assert node.separator_count == 1

    def test_income_table_rows(self, story):
        node = story[_index_of(story, lambda n: _first_cell(n) == INCOME_HEADING)]
        assert len(node.rows) == 4
        assert [r.cells[0].content for r in node.rows[1:]] == [
            "Saldo em 31/12/2020", "Saldo em 31/12/2021", "Rendimentos Líquidos"]
        assert [r.cells[1].content for r in node.rows[1:]] == ["R$0", "R$0", "R$0"]

    def test_btc_transaction_table(self, story):
        heading = _asset_heading_index(story, "Bitcoin - BTC", 2021)
        table = story[heading + 1]
        contents = [[c.content for c in r.cells] for r in table.rows]
        assert contents == [
            ["Fonte", "Saldo", "Custo", "Preço"],
            ["Comprado", "0,5 BTC", "R$0,0535", "R$205.000"],
            ["Vendido", "-0,2 BTC", "N/A", "N/A"],
            ["Depositado", "0,1 BTC", "N/A", "N/A"],
            ["Sacado", "-0,1 BTC", "N/A", "N/A"],
            ["Total", "0,3 BTC", "R$0,0535", "R$205.000"],
        ]
        assert all(c.bold for c in table.rows[-1].cells)

    @pytest.mark.parametrize("label,year,accent", [
        ("Bitcoin - BTC", 2021, BTC_BLUE),
        ("PAX Gold - PAXG", 2021, GOLD),
        ("Bitcoin - BTC", 2020, BTC_BLUE),
        ("PAX Gold - PAXG", 2020, GOLD),
    ])
    def test_total_row_in_asset_accent(self, story, label, year, accent):
        table = story[_asset_heading_index(story, label, year) + 1]
        total = table.rows[-1]
        assert total.cells[0].content == "Total"
        assert all(c.color == accent for c in total.cells)
        assert all(c.color != accent for r in table.rows[:-1] for c in r.cells)
        rendered = total.flowable()._cellvalues[0]
        assert all(p.style.textColor.rgb() == pytest.approx(rl_color(accent).rgb()) for p in rendered)

    def test_net_income_row_is_green(self, story):
        node = story[_index_of(story, lambda n: _first_cell(n) == INCOME_HEADING)]
        net = node.rows[-1]
        assert net.cells[0].content == "Rendimentos Líquidos"
        assert all(c.color == BIPA_GREEN for c in net.cells)
        assert all(c.color != BIPA_GREEN for r in node.rows[:-1] for c in r.cells)

    def test_paxg_transaction_table(self, story):
        heading = _asset_heading_index(story, "PAX Gold - PAXG", 2020)
        table = story[heading + 1]
        assert [r.cells[0].content for r in table.rows] == ["Fonte", "Comprado", "Vendido", "Total"]
        assert table.rows[-1].cells[1].content == "0,3 PAXG"

    def test_gold_section_has_no_title(self, story):
        node = story[_asset_heading_index(story, "PAX Gold - PAXG", 2021)]
        (section,) = _sections(node)
        assert section.title is None
        assert section.theme.name == "gold"

    def test_deterministic(self, report_assets):
        logo = load_logo(report_assets.logo)
        a, b = build_story(logo), build_story(logo)
        assert [type(n) for n in a] == [type(n) for n in b]
        assert [_first_cell(n) for n in a] == [_first_cell(n) for n in b]


# ═══════════════════════════════════════════════════════════════════════
# End-to-end rendering
# ═══════════════════════════════════════════════════════════════════════

class TestRendering:
    def test_output_is_pdf(self, rendered):
        assert rendered.exists()
        assert rendered.read_bytes().startswith(b"%PDF")

    def test_page_count(self, rendered):
        assert len(PdfReader(str(rendered)).pages) >= 3

    @pytest.mark.parametrize("needle", ["Bitcoin - BTC", "PAX Gold - PAXG", "Rendimentos Líquidos"])
    def test_contains_text(self, rendered, needle):
        assert needle in "\n".join(_page_texts(rendered))

    def test_page_headers(self, rendered):
        pages = _page_texts(rendered)
        assert "Página" not in pages[0]
        for n, text in enumerate(pages[1:], start=2):
            assert f"Página {n}" in text

    def test_metadata(self, rendered):
        meta = PdfReader(str(rendered)).metadata
        assert meta.title == "Informe de Rendimentos Financeiro"

    def test_same_text_on_every_run(self, report_assets):
        a = generate_report_pdf(font_dir=report_assets.font_dir, logo_path=report_assets.logo)
        b = generate_report_pdf(font_dir=report_assets.font_dir, logo_path=report_assets.logo)
        assert _page_texts(a) == _page_texts(b)

    def test_overwrites_existing_file(self, report_assets, tmp_path):
        out = tmp_path / "informe.pdf"
        out.write_bytes(b"stale")
        write_report(out, font_dir=report_assets.font_dir, logo_path=report_assets.logo)
        assert out.read_bytes().startswith(b"%PDF")


# ═══════════════════════════════════════════════════════════════════════
# Failures
# ═══════════════════════════════════════════════════════════════════════

class TestFailures:
    def test_missing_font_aborts_before_output(self, report_assets, tmp_path):
        out = tmp_path / "informe.pdf"
        with pytest.raises(ReportAssetError):
            write_report(out, font_dir=tmp_path / "missing", logo_path=report_assets.logo)
        assert not out.exists()

    def test_missing_logo_aborts_before_output(self, report_assets, tmp_path):
        out = tmp_path / "informe.pdf"
        with pytest.raises(ReportAssetError):
            write_report(out, font_dir=report_assets.font_dir, logo_path=tmp_path / "missing.jpg")
        assert not out.exists()

    def test_unwritable_destination(self, report_assets, tmp_path):
        out = tmp_path / "no-such-dir" / "informe.pdf"
        with pytest.raises(ReportWriteError) as info:
            write_report(out, font_dir=report_assets.font_dir, logo_path=report_assets.logo)
        assert info.value.path == out
        assert isinstance(info.value.__cause__, OSError)
