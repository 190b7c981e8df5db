"""
Regex/keyword extraction used when the model output cannot be parsed.

The result is deliberately coarse: one offer per supplier keyword found in the
text, with the molecule price read from the text around the first mention of
that supplier and every other tariff component at its default value. Offers
produced here are flagged "À vérifier" so the user reviews them.
"""

from __future__ import annotations

import logging
import re
from typing import List

from domain.canonical import ExtractedOffer
from fields.normalization import default_offer, normalize_number

logger = logging.getLogger(__name__)

SUPPLIER_KEYWORDS = {
    "engie": "ENGIE",
    "totalenergies": "TotalEnergies",
    "total energies": "TotalEnergies",
    "edf": "EDF",
    "ekwateur": "Ekwateur",
    "vattenfall": "Vattenfall",
    "eni": "ENI",
    "dyneff": "Dyneff",
}

ANALYSED_DOCUMENT = "Document analysé"
MANUAL_CHECK = "À vérifier manuellement"
TO_CHECK = "À vérifier"
FALLBACK_CEE = 8.5

WINDOW_BEFORE = 200
WINDOW_AFTER = 300

# (pattern, divisor): ct€/kWh and centimes/kWh are converted to €/MWh
PRICE_PATTERNS = (
    (re.compile(r"(\d+[,.]?\d*)\s*€/MWh", re.IGNORECASE), 1),
    (re.compile(r"(\d+[,.]?\d*)\s*ct?€/kWh", re.IGNORECASE), 10),
    (re.compile(r"(\d+[,.]?\d*)\s*centimes?/kWh", re.IGNORECASE), 10),
)


def extract_price_near_provider(text: str, provider: str) -> float:
    """
    Read a molecule price (€/MWh) close to the first mention of `provider`.

    Looks in [mention - 200, mention + 300] characters for a €/MWh price first,
    then a ct€/kWh or centimes/kWh price (divided by 10). Returns 0 if none.
    """
    text = text or ""
    provider_index = text.lower().find(provider.lower())
    if provider_index == -1:
        return 0.0

    context = text[max(0, provider_index - WINDOW_BEFORE): provider_index + WINDOW_AFTER]

    for pattern, divisor in PRICE_PATTERNS:
        match = pattern.search(context)
        if match:
            return normalize_number(match.group(1)) / divisor

    return 0.0


def find_supplier_keywords(text: str) -> List[str]:
    lower = (text or "").lower()
    return [keyword for keyword in SUPPLIER_KEYWORDS if keyword in lower]


def fallback_extract(text: str, file_name: str) -> List[ExtractedOffer]:
    """Build offers from supplier keywords in `text`; always returns at least one offer."""
    found = find_supplier_keywords(text)
    logger.info("Fallback extraction on %s: %d supplier keyword(s) found", file_name, len(found))

    if not found:
        return [default_offer(ANALYSED_DOCUMENT, MANUAL_CHECK)]

    return [
        default_offer(
            SUPPLIER_KEYWORDS[keyword],
            TO_CHECK,
            cee=FALLBACK_CEE,
            prixMolecule=extract_price_near_provider(text, keyword),
        )
        for keyword in found
    ]
