"""
IMAGE READER
------------
OCR of scanned contracts and screenshots of broker tables.
"""

from __future__ import annotations

import io

import pytesseract
from PIL import Image, UnidentifiedImageError

from config import OCR_LANGUAGES
from domain.errors import ReadError, UnsupportedFormatError


def read_image(data: bytes, languages: str = OCR_LANGUAGES) -> str:
    """
    Run OCR on image bytes.

    Args:
        data: Raw image content (PNG, JPEG, TIFF, ...)
        languages: Tesseract language codes, e.g. "fra+eng"

    Returns:
        Recognized text

    Raises:
        UnsupportedFormatError: If Pillow cannot identify the image
        ReadError: If OCR fails (e.g. tesseract binary missing)
    """
    try:
        image = Image.open(io.BytesIO(data))
    except UnidentifiedImageError as e:
        raise UnsupportedFormatError(f"Unrecognized image format: {e}") from e

    try:
        with image:
            return pytesseract.image_to_string(image, lang=languages)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
        raise ReadError(f"OCR failed: {e}") from e
