"""
Text extraction for uploaded contract documents.

`extract_text` dispatches on the declared media type (falling back on the file
extension) and returns raw text; it never interprets the content.
"""

from __future__ import annotations

from domain.errors import UnsupportedFormatError
from domain.upload import UploadedFile

from .document import read_docx, read_text
from .excel import read_excel, read_excel_rows
from .image import read_image
from .pdf import read_pdf

PDF_TYPES = {"application/pdf"}
DOCX_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
XLSX_TYPES = {"application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"}
LEGACY_TYPES = {"application/msword", "application/vnd.ms-excel"}

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp", ".gif"}


def extract_text(file: UploadedFile) -> str:
    """
    Extract raw text from an uploaded file.

    PDF -> page text layers; image -> OCR; .docx -> raw text; .xlsx -> rows as
    text lines; anything else is decoded as UTF-8 text.

    Raises:
        UnsupportedFormatError: Legacy binary Office formats or unidentifiable images
        ReadError: The file matched a format but could not be read
    """
    media_type = (file.media_type or "").lower()
    suffix = file.suffix

    if media_type in LEGACY_TYPES or suffix in (".doc", ".xls"):
        raise UnsupportedFormatError(f"Unsupported legacy format: {file.name} ({media_type or suffix})")
    if media_type in PDF_TYPES or suffix == ".pdf":
        return read_pdf(file.content)
    if media_type.startswith("image/") or suffix in IMAGE_SUFFIXES:
        return read_image(file.content)
    if media_type in XLSX_TYPES or suffix == ".xlsx":
        return read_excel(file.content)
    if media_type in DOCX_TYPES or suffix == ".docx":
        return read_docx(file.content)
    return read_text(file.content)


__all__ = [
    "extract_text",
    "read_docx",
    "read_excel",
    "read_excel_rows",
    "read_image",
    "read_pdf",
    "read_text",
]
