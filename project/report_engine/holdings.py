# holdings.py
# ------------------------------------------------------------------
# The literal figures printed in the report, kept apart from layout.
#
# Every value below is a fixed constant of the statement. Transaction
# rows are exposed as a pandas DataFrame so the report can be checked
# (quantities per asset and year) without the checks ever rewriting
# what gets printed: the "Total" rows stay literal.
# ------------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Tuple, Union

import pandas as pd

_logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────
# Identification
# ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Party:
    role: str                               # section title
    name: str                               # section subtitle
    fields: Tuple[Tuple[str, str], ...]     # (label, value) pairs for the body


PAYER = Party(
    role="Identificação da Fonte Pagadora",
    name="Acesso Soluções de Pagamento S.A.",
    fields=(("CNPJ:", "13.140.088/0001-99"),),
)

BENEFICIARY = Party(
    role="Pessoa Física Beneficiária dos Rendimentos",
    name="Felipe Rosa",
    fields=(
        ("CPF:", "000.000.000-00"),
        ("Agência:", "0001"),
        ("Conta:", "0020332"),
    ),
)

CUSTODIAN = Party(
    role="Identificação da Fonte Compradora e Custodiante de Criptoativos",
    name="Bipa Intermediação de Ativos Digitais LTDA",
    fields=(("CNPJ:", "37.008.710/0001-78"),),
)


# ─────────────────────────────────────────────────────────────────
# Exclusive-taxation income
# ─────────────────────────────────────────────────────────────────
INCOME_HEADING = "Rendimentos Sujeitos a Tributação Exclusiva"
INCOME_UNIT    = "Valores em R$"

INCOME_BALANCES: Tuple[Tuple[str, str], ...] = (
    ("Saldo em 31/12/2020", "R$0"),
    ("Saldo em 31/12/2021", "R$0"),
)
NET_INCOME = ("Rendimentos Líquidos", "R$0")


# ─────────────────────────────────────────────────────────────────
# Crypto assets
# ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Asset:
    ticker: str
    label: str          # "Bens e Direitos" code + description
    theme: str          # key into builder.THEMES
    show_heading: bool  # whether the "Bens e Direitos" title precedes it


ASSETS_HEADING = "Bens e Direitos"

ASSETS: Tuple[Asset, ...] = (
    Asset("BTC",  "81 - Criptoativo Bitcoin - BTC",             "crypto-blue", True),
    Asset("PAXG", "89 - Outros criptoativos (PAX Gold - PAXG)", "gold",        False),
)

# Reporting years, in the order they appear in the document.
STATEMENT_YEARS: Tuple[int, ...] = (2021, 2020)

TRANSACTION_COLUMNS = ("Fonte", "Saldo", "Custo", "Preço")

_UNIT_COST  = "R$0,0535"
_UNIT_PRICE = "R$205.000"
_NA         = "N/A"

# (source, quantity, cost, price) per asset; identical for both years.
_TRANSACTIONS: Dict[str, List[Tuple[str, Decimal, str, str]]] = {
    "BTC": [
        ("Comprado",   Decimal("0.5"),  _UNIT_COST, _UNIT_PRICE),
        ("Vendido",    Decimal("-0.2"), _NA, _NA),
        ("Depositado", Decimal("0.1"),  _NA, _NA),
        ("Sacado",     Decimal("-0.1"), _NA, _NA),
    ],
    "PAXG": [
        ("Comprado", Decimal("0.5"),  _UNIT_COST, _UNIT_PRICE),
        ("Vendido",  Decimal("-0.2"), _NA, _NA),
    ],
}


@dataclass(frozen=True)
class StatementTotal:
    quantity: Decimal
    cost: str
    price: str


# Printed as-is. These are NOT derived from the transaction rows.
_TOTALS: Dict[Tuple[int, str], StatementTotal] = {
    (2021, "BTC"):  StatementTotal(Decimal("0.3"), _UNIT_COST, _UNIT_PRICE),
    (2021, "PAXG"): StatementTotal(Decimal("0.3"), _UNIT_COST, _UNIT_PRICE),
    (2020, "BTC"):  StatementTotal(Decimal("0.3"), _UNIT_COST, _UNIT_PRICE),
    (2020, "PAXG"): StatementTotal(Decimal("0.3"), _UNIT_COST, _UNIT_PRICE),
}


def statement_date(year: int) -> str:
    return f"31/12/{year}"


def format_quantity(quantity: Union[Decimal, str, int, float], ticker: str) -> str:
    """
    Render a quantity with every digit it carries and a decimal comma:
    Decimal("0.5") -> '0,5 BTC', Decimal("0.00000001") -> '0,00000001 BTC'.
    Floats go through their shortest repr first, so 0.1 stays '0,1'.
    """
    if not isinstance(quantity, Decimal):
        quantity = Decimal(str(quantity))
    digits = format(quantity.normalize(), "f")
    return f"{digits} {ticker}".replace(".", ",")


def holdings_frame() -> pd.DataFrame:
    """All transaction rows as a DataFrame, in report order."""
    records = [
        {"year": year, "ticker": asset.ticker, "source": source,
         "quantity": qty, "cost": cost, "price": price}
        for year in STATEMENT_YEARS
        for asset in ASSETS
        for source, qty, cost, price in _TRANSACTIONS[asset.ticker]
    ]
    return pd.DataFrame.from_records(
        records, columns=["year", "ticker", "source", "quantity", "cost", "price"])


def transactions_for(year: int, ticker: str) -> pd.DataFrame:
    df = holdings_frame()
    return df[(df["year"] == year) & (df["ticker"] == ticker)].reset_index(drop=True)


def statement_total(year: int, ticker: str) -> StatementTotal:
    return _TOTALS[(year, ticker)]


def _decimal_sum(values) -> Decimal:
    return sum(values, Decimal(0))


def check_totals() -> List[Tuple[int, str, Decimal, Decimal]]:
    """
    Compare each literal total quantity with the exact sum of its
    transaction rows. Returns (year, ticker, printed, summed) for every
    mismatch and logs a warning for each; the printed totals are left
    untouched.
    """
    sums = holdings_frame().groupby(["year", "ticker"])["quantity"].agg(_decimal_sum)
    mismatches = []
    for (year, ticker), total in _TOTALS.items():
        summed = sums.get((year, ticker), Decimal(0))
        if total.quantity != summed:
            _logger.warning(
                "Printed total for %s %d is %s but transactions sum to %s",
                ticker, year, format_quantity(total.quantity, ticker),
                format_quantity(summed, ticker),
            )
            mismatches.append((year, ticker, total.quantity, summed))
    return mismatches
