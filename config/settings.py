"""
Central configuration for extraction limits, model settings and cost defaults.

This module defines:
- Input limits (file size, minimum usable text, PDF page cap) applied before any LLM call.
- Text bounds for the request sent to the model and for the embedded prompt preview.
- Default LLM model settings tuned for deterministic JSON output.
- Default consumption and VAT rates used by the cost ranking.
- Storage and logging locations.

Values are constants; a few can be overridden through environment variables
(loaded from a `.env` file via dotenv).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


PROJECT_ROOT = Path(__file__).resolve().parents[1]

OFFER_STORE_DIR = Path(os.getenv("OFFER_STORE_DIR", str(PROJECT_ROOT / "data" / "offers")))

MAX_FILE_SIZE_MB = 10
MIN_TEXT_CHARS = 50
MAX_PDF_PAGES = 15
OCR_LANGUAGES = "fra+eng"

MAX_REQUEST_TEXT_CHARS = 15_000
MAX_PROMPT_TEXT_CHARS = 8_000

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
DEFAULT_TEMPERATURE = 0.05
MAX_OUTPUT_TOKENS = 3_000

DEFAULT_CONSUMPTION_MWH = 600
DEFAULT_TVA_FIXE = 0.055
DEFAULT_TVA_VAR = 0.2

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
