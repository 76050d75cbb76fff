"""Renderer Dispatch - one entry point from (ReportTable, ReportFormat) to bytes.

Invariants:
    - Any renderer failure surfaces as ReportGenerationError (HTTP 500)
"""

import logging

from sis.core.domain_types import ReportFormat
from sis.core.errors import ReportGenerationError
from sis.reports.csv_export import render_csv
from sis.reports.excel import render_excel
from sis.reports.pdf import render_pdf
from sis.reports.table import ReportTable

logger = logging.getLogger(__name__)

_RENDERERS = {
    ReportFormat.EXCEL: render_excel,
    ReportFormat.PDF: render_pdf,
    ReportFormat.CSV: render_csv,
}


def render(table: ReportTable, fmt: ReportFormat) -> bytes:
    try:
        return _RENDERERS[fmt](table)
    except Exception as e:
        logger.error(
            f"Rendering {table.sheet_name} as {fmt.value} failed: {e}",
            exc_info=True,
            extra={"report_format": fmt.value},
        )
        raise ReportGenerationError(table.sheet_name, str(e)) from e
