# app.py
"""
Informe de Rendimentos - command-line entry point
=================================================

Generates the fixed "Informe de Rendimentos Financeiro" PDF from the
assets under ./assets and writes it to ./informe_rendimentos.pdf.

Takes no arguments. Exit codes:
  0  report written
  1  a font/logo asset could not be loaded, or the output could not be
     written (the reason is logged)
"""
import sys
import logging

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
sys.path.append(str(ROOT_DIR))

from report_engine.assets import ReportAssetError
from pdf_export import ReportWriteError, write_report

_logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> int:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        path = write_report()
    except ReportAssetError as exc:
        _logger.error("Missing report asset, nothing was written: %s", exc)
        return 1
    except ReportWriteError as exc:
        _logger.error("%s", exc)
        return 1
    _logger.info("Report written to %s", path.resolve())
    return 0


if __name__ == "__main__":
    sys.exit(main())
