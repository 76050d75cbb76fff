"""Excel Renderer - ReportTable → .xlsx bytes via openpyxl."""

import io

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter

from sis.reports.table import ReportTable


def render_excel(table: ReportTable) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = table.sheet_name[:31]

    ws.append([table.title])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([table.subtitle])
    ws.append([])

    ws.append(table.headers)
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")

    for row in table.rows:
        ws.append(row)

    if table.summary_lines:
        ws.append([])
        for label, value in table.summary_lines:
            ws.append([label, value])
            ws.cell(row=ws.max_row, column=1).font = Font(bold=True)

    for idx, header in enumerate(table.headers, start=1):
        width = max(
            [len(str(header))] + [len(str(r[idx - 1])) for r in table.rows],
        )
        ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 50)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
