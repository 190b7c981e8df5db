"""
EXCEL READER
------------
Reads broker/comparison spreadsheets and renders them as plain text lines so
they go through the same text pipeline as PDFs. Row 1 is the header row.
"""

from __future__ import annotations

import io
from typing import Any, Dict, List, Tuple

from openpyxl import load_workbook

from domain.errors import ReadError


def _unique_headers(headers: List[str]) -> List[str]:
    """Suffix repeated header names ("Prix", "Prix" -> "Prix", "Prix_2")."""
    seen: Dict[str, int] = {}
    unique = []
    for header in headers:
        seen[header] = seen.get(header, 0) + 1
        unique.append(header if seen[header] == 1 else f"{header}_{seen[header]}")
    return unique


def _read_sheet(data: bytes, sheet_name: str | None) -> Tuple[List[str], List[Tuple[Any, ...]]]:
    """Return the header names and the non-empty data rows of a sheet."""
    try:
        wb = load_workbook(io.BytesIO(data), data_only=True, read_only=True)
    except Exception as e:
        raise ReadError(f"Cannot read Excel file (is it corrupted or wrong format?): {e}") from e

    try:
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]
        rows_iter = ws.iter_rows(values_only=True)

        header_row = next(rows_iter, None)
        if header_row is None:
            return [], []
        headers = [
            str(h).strip() if h is not None else f"col_{c}"
            for c, h in enumerate(header_row, start=1)
        ]

        rows = [values for values in rows_iter if not all(v in (None, "") for v in values)]
    finally:
        wb.close()

    return headers, rows


def read_excel_rows(data: bytes, sheet_name: str | None = None) -> List[Dict[str, Any]]:
    """
    Read an Excel workbook where row 1 = headers, rows 2+ = data.

    Args:
        data: Raw .xlsx content
        sheet_name: Optional sheet name (uses first sheet if None)

    Returns:
        List of row dicts keyed by header (repeated headers get a _2, _3 suffix;
        empty rows skipped)

    Raises:
        ReadError: If the content is not a readable workbook
    """
    headers, rows = _read_sheet(data, sheet_name)
    keys = _unique_headers(headers)
    return [dict(zip(keys, values)) for values in rows]


def read_excel(data: bytes, sheet_name: str | None = None) -> str:
    """Render the header and every data row as ' | '-separated text lines."""
    headers, rows = _read_sheet(data, sheet_name)
    if not headers:
        return ""

    lines = [" | ".join(headers)]
    for values in rows:
        lines.append(" | ".join("" if v is None else str(v) for v in values))
    return "\n".join(lines)
