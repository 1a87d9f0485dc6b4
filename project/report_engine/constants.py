# constants.py
# ------------------------------------------------------------------
# Shared layout constants and fixed file locations for the report.
#
# Colors are plain RGB triples (0-255) so that the data layer and the
# tests can compare them without touching reportlab; the builder turns
# them into reportlab colors at the last moment.
# ------------------------------------------------------------------

from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

# ── Palette ───────────────────────────────────────────────────────
BIPA_GREEN = (0, 206, 120)
BTC_BLUE   = (68, 87, 212)
GOLD       = (255, 204, 0)
BLACK      = (28, 28, 30)
GRAY3      = (199, 199, 204)
GRAY4      = (174, 174, 178)

# ── Page geometry ─────────────────────────────────────────────────
PAGE_W, PAGE_H = A4
MARGIN    = 10 * mm
CONTENT_W = PAGE_W - 2 * MARGIN

# Space reserved above the frame on later pages for the "Página N" header.
HEADER_H = 8 * mm

# Line spacing applied to every paragraph (leading = size * LINE_SPACING).
LINE_SPACING = 1.25

# ── Paddings ──────────────────────────────────────────────────────
SECTION_GAP     = 2 * mm   # between title, subtitle and body of a section
ROW_PADDING     = 2 * mm   # top and bottom of every row cell
BLOCK_PADDING   = 5 * mm   # identification / asset heading tables
BALANCE_PADDING = 3 * mm   # income and transaction tables

# Horizontal inset between a framed table's border and its rows.
FRAME_INSET = 3 * mm
ROW_W       = CONTENT_W - 2 * FRAME_INSET

# ── Assets & output ───────────────────────────────────────────────
# Relative to the working directory the program is launched from.
ASSETS_DIR  = Path("assets")
FONT_FAMILY = "Roboto"
FONT_DIR    = ASSETS_DIR / FONT_FAMILY
LOGO_PATH   = ASSETS_DIR / "bipa-logo.jpg"
LOGO_SCALE  = 0.3
OUTPUT_PATH = Path("informe_rendimentos.pdf")

# ── Document metadata ─────────────────────────────────────────────
REPORT_TITLE   = "Informe de Rendimentos Financeiro"
REPORT_AUTHOR  = "Bipa Intermediação de Ativos Digitais LTDA"
REPORT_SUBJECT = "Imposto de Renda - Pessoa Física"
