"""
Value normalization for tariff offers.

Model output and regex captures arrive as numbers, locale-formatted strings
("8,69 €/MWh"), nulls or garbage. Everything here is total: bad input turns
into a documented default, never into an exception or NaN.

The numeric defaults are observed French gas tariff values (distribution,
transport, CTA, TICGN). They are policy data and must stay exactly as they are.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Mapping

from domain.canonical import NUMERIC_FIELDS, ExtractedOffer

UNKNOWN_SUPPLIER = "Fournisseur inconnu"
UNSPECIFIED_CONTRACT = "Non spécifié"

OFFER_DEFAULTS: Dict[str, float] = {
    "prixMolecule": 0.0,
    "cee": 0.0,
    "transport": 8.69,
    "abonnementF": 0.0,
    "distribution": 5022.04,
    "transportAnn": 1231.08,
    "cta": 304.52,
    "ticgn": 17.16,
}

_NON_NUMERIC = re.compile(r"[^\d,.]")
_LEADING_FLOAT = re.compile(r"^(?:\d+\.?\d*|\.\d+)")


def _parse_leading_float(text: str) -> float:
    """Parse the longest numeric prefix ("8.69.1" -> 8.69); 0.0 when there is none."""
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def normalize_number(value: Any) -> float:
    """Convert any raw value into a finite float; unusable input gives 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value).replace(",", ".", 1)
        number = _parse_leading_float(cleaned)
        return number if math.isfinite(number) else 0.0
    return 0.0


def _clean_text(value: Any, default: str) -> str:
    if not value:
        return default
    text = str(value).strip()
    return text or default


def normalize_offer(raw: Mapping[str, Any]) -> ExtractedOffer:
    """Convert a model-produced dict into a complete ExtractedOffer with defaults."""
    if not isinstance(raw, Mapping):
        raw = {}

    offer: Dict[str, Any] = {
        "fournisseur": _clean_text(raw.get("fournisseur"), UNKNOWN_SUPPLIER),
        "typeContrat": _clean_text(raw.get("typeContrat"), UNSPECIFIED_CONTRACT),
    }

    for field in NUMERIC_FIELDS:
        number = max(normalize_number(raw.get(field)), 0.0)
        offer[field] = number or OFFER_DEFAULTS[field]

    # absent stays absent: no reference consumption is invented
    if raw.get("consommationReference") is not None:
        offer["consommationReference"] = max(normalize_number(raw["consommationReference"]), 0.0)

    return ExtractedOffer(**offer)


def default_offer(fournisseur: str, type_contrat: str, **overrides: float) -> ExtractedOffer:
    """Build an offer made of the default tariff values, with optional numeric overrides."""
    offer: Dict[str, Any] = {"fournisseur": fournisseur, "typeContrat": type_contrat}
    offer.update(OFFER_DEFAULTS)
    offer.update(overrides)
    return ExtractedOffer(**offer)


def is_unknown_supplier(offer: Mapping[str, Any]) -> bool:
    return offer.get("fournisseur") == UNKNOWN_SUPPLIER
