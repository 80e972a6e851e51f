import csv
import io
import json
from typing import Any, Iterable, Sequence

from openpyxl import Workbook


def _build_workbook(headers: Sequence[str], rows: Iterable[Sequence], title: str = "Sheet") -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))
    return wb


def rows_to_xlsx_stream(headers: Sequence[str], rows: Iterable[Sequence], title: str = "Sheet") -> io.BytesIO:
    """Build a workbook in memory, ready for a StreamingResponse."""
    wb = _build_workbook(headers, rows, title)
    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def rows_to_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)
