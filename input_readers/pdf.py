"""
PDF READER
----------
Concatenates the text layer of each page. Scanned PDFs without a text layer
come back (nearly) empty and are skipped upstream as too short.
"""

from __future__ import annotations

import io

import pdfplumber

from config import MAX_PDF_PAGES
from domain.errors import ReadError


def read_pdf(data: bytes, max_pages: int = MAX_PDF_PAGES) -> str:
    """
    Extract text from PDF bytes, page by page.

    Args:
        data: Raw PDF content
        max_pages: Only the first pages are read to bound processing time

    Returns:
        Page texts joined with blank lines

    Raises:
        ReadError: If the PDF cannot be opened or parsed
    """
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = []
            for page in pdf.pages[:max_pages]:
                pages.append(page.extract_text() or "")
    except Exception as e:
        raise ReadError(f"Cannot read PDF (is it corrupted or encrypted?): {e}") from e

    return "\n\n".join(pages)
