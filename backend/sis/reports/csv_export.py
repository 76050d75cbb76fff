"""CSV Renderer - ReportTable → UTF-8 CSV bytes (header row first, no title lines)."""

import csv
import io

from sis.reports.table import ReportTable


def render_csv(table: ReportTable) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(table.headers)
    writer.writerows(table.rows)
    return buffer.getvalue().encode("utf-8")
