"""Downloadable sample files showing the expected member import layout."""

import csv
import io

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from .constants import TEMPLATE_HEADERS, TEMPLATE_ROWS

TEMPLATE_FILENAME = "member_import_sample"


def generate_template_csv() -> bytes:
    """Reference headers plus two example members as CSV."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerows(TEMPLATE_ROWS)
    return output.getvalue().encode("utf-8")


def generate_template_xlsx() -> bytes:
    """Reference headers plus two example members as an XLSX workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Members"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

    ws.append(TEMPLATE_HEADERS)
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill

    for row in TEMPLATE_ROWS:
        ws.append(row)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
