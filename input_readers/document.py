"""
WORD / TEXT READERS
-------------------
Raw-text extraction for .docx contracts and plain-text fallbacks.
"""

from __future__ import annotations

import io
import zipfile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from domain.errors import ReadError


def read_docx(data: bytes) -> str:
    """Extract paragraphs and table cells of a .docx document, in document order per kind."""
    try:
        document = Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ReadError(f"Cannot read Word document: {e}") from e

    parts = [p.text for p in document.paragraphs if p.text.strip()]

    # broker tables are often Word tables
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                parts.append(" | ".join(cells))

    return "\n".join(parts)


def read_text(data: bytes, encoding: str = "utf-8") -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ReadError(f"File is not valid {encoding} text: {e}") from e
