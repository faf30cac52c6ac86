"""
Record list export.

The exporters are projection-agnostic: they write whatever flat rows they
are given. ``project_for_export`` is the step callers use to turn
normalized complaints and apologies into the flat table the wardens
download.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.core.exceptions import ValidationError
from app.services.records import RecordKind, student_name, student_room
from app.utils.date_utils import now_utc
from app.utils.formatters import format_date

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

NOT_AVAILABLE = "N/A"
MAX_COLUMN_WIDTH = 50


class ExportFormat(str, Enum):
    """Export file formats."""
    CSV = "csv"
    JSON = "json"
    EXCEL = "xlsx"


@dataclass(frozen=True)
class ExportFile:
    """A generated download."""

    filename: str
    media_type: str
    content: Union[str, bytes]
    count: int = 0

    @property
    def size(self) -> int:
        return len(self.content)


def _with_extension(filename: str, extension: str) -> str:
    return filename if filename.lower().endswith(f".{extension}") else f"{filename}.{extension}"


def collect_headers(rows: Iterable[Row]) -> List[str]:
    """Union of row keys in order of first appearance."""
    headers: Dict[str, None] = {}
    for row in rows:
        for key in row or {}:
            headers.setdefault(key, None)
    return list(headers)


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


def export_to_csv(rows: Sequence[Row], filename: str = "export.csv") -> ExportFile:
    """
    Render rows as CSV.

    The header row lists every key seen across the rows. Data cells are all
    quoted; missing keys and ``None`` produce empty cells.
    """
    headers = collect_headers(rows)
    output = io.StringIO()

    csv.writer(output, lineterminator="\n").writerow(headers)
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell((row or {}).get(header)) for header in headers])

    content = output.getvalue().rstrip("\n")
    output.close()

    logger.info(f"Exported {len(rows)} rows to CSV")
    return ExportFile(
        filename=_with_extension(filename, ExportFormat.CSV.value),
        media_type="text/csv; charset=utf-8",
        content=content,
        count=len(rows),
    )


def export_to_json(rows: Union[Sequence[Row], Row], filename: str = "export.json") -> ExportFile:
    """Render rows as 2-space indented JSON."""
    content = json.dumps(rows, indent=2, ensure_ascii=False, default=str)
    count = len(rows) if isinstance(rows, list) else 1

    logger.info(f"Exported {count} rows to JSON")
    return ExportFile(
        filename=_with_extension(filename, ExportFormat.JSON.value),
        media_type="application/json",
        content=content,
        count=count,
    )


_THIN = Side(style="thin")
_HEADER_STYLE = {
    "font": Font(bold=True, color="FFFFFF"),
    "fill": PatternFill(start_color="4F46E5", end_color="4F46E5", fill_type="solid"),
    "alignment": Alignment(horizontal="center", vertical="center"),
    "border": Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN),
}


def _apply_style(cell, style: Dict[str, Any]) -> None:
    for attr, value in style.items():
        setattr(cell, attr, value)


def export_to_excel(rows: Sequence[Row], filename: str = "export.xlsx", title: str = "Export") -> ExportFile:
    """Render rows into a single-sheet workbook with a styled header row."""
    headers = collect_headers(rows)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title[:31]

    for col, header in enumerate(headers, 1):
        _apply_style(sheet.cell(row=1, column=col, value=header), _HEADER_STYLE)

    for row_idx, row in enumerate(rows, 2):
        for col, header in enumerate(headers, 1):
            sheet.cell(row=row_idx, column=col, value=_cell((row or {}).get(header)))

    for column_cells in sheet.columns:
        length = max(len(str(cell.value or "")) for cell in column_cells)
        sheet.column_dimensions[get_column_letter(column_cells[0].column)].width = min(length + 2, MAX_COLUMN_WIDTH)

    buffer = io.BytesIO()
    workbook.save(buffer)

    logger.info(f"Exported {len(rows)} rows to Excel")
    return ExportFile(
        filename=_with_extension(filename, ExportFormat.EXCEL.value),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        content=buffer.getvalue(),
        count=len(rows),
    )


def project_for_export(records: Iterable[Row], kind: Union[RecordKind, str]) -> List[Row]:
    """Flatten normalized records into the download table for one view."""
    kind = RecordKind(kind)
    rows = []
    for record in records:
        created = record.get("createdAt") or record.get("created_at") or record.get("date")
        if kind is RecordKind.COMPLAINT:
            row = {
                "ID": record.get("id"),
                "Title": record.get("title"),
                "Status": record.get("status"),
                "Category": record.get("type"),
                "Priority": record.get("priority") or NOT_AVAILABLE,
            }
        else:
            row = {
                "ID": record.get("id"),
                "Message": record.get("message"),
                "Status": record.get("status"),
                "Type": record.get("type"),
            }
        row["Student"] = student_name(record) or NOT_AVAILABLE
        row["Room"] = student_room(record) or NOT_AVAILABLE
        row["Date"] = format_date(created)
        rows.append(row)
    return rows


def export_filename(kind: Union[RecordKind, str], today: Optional[date] = None) -> str:
    """Base download name such as ``complaints_2025-01-31``."""
    today = today or now_utc().date()
    return f"{RecordKind(kind).plural}_{today.isoformat()}"


def export_records(
    records: Sequence[Row],
    kind: Union[RecordKind, str],
    format: Union[ExportFormat, str] = ExportFormat.CSV,
    filename: Optional[str] = None,
) -> ExportFile:
    """
    Export a visible record list in the requested format.

    CSV and Excel use the flat projection; JSON keeps the full records.

    Raises:
        ValidationError: Unknown export format.
    """
    try:
        format = ExportFormat(str(getattr(format, "value", format)).lower())
    except ValueError:
        raise ValidationError(
            f"Unsupported export format: {format}",
            field_errors={"format": ["Must be one of csv, json, xlsx"]},
        )

    filename = filename or export_filename(kind)

    if format is ExportFormat.JSON:
        return export_to_json(list(records), filename)

    rows = project_for_export(records, kind)
    if format is ExportFormat.EXCEL:
        return export_to_excel(rows, filename, title=RecordKind(kind).plural.capitalize())
    return export_to_csv(rows, filename)


__all__ = [
    "ExportFormat",
    "ExportFile",
    "collect_headers",
    "export_to_csv",
    "export_to_json",
    "export_to_excel",
    "project_for_export",
    "export_filename",
    "export_records",
]
