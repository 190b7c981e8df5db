"""
Structural parsing of model output.

The raw completion text is turned into one of three variants:
- MultiOffer: `{"offers": [...]}` (or a bare JSON list of offer objects)
- SingleOffer: a flat object carrying offer fields
- Unparseable: anything else, with the reason

Light repairs are applied before giving up: markdown code fences and
surrounding prose are stripped, and trailing commas are removed.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from domain.canonical import NUMERIC_FIELDS

OFFER_KEYS = frozenset(("fournisseur", "typeContrat", "consommationReference") + NUMERIC_FIELDS)


@dataclass(frozen=True)
class MultiOffer:
    offers: List[Dict[str, Any]]


@dataclass(frozen=True)
class SingleOffer:
    offer: Dict[str, Any]


@dataclass(frozen=True)
class Unparseable:
    reason: str


ParsedPayload = Union[MultiOffer, SingleOffer, Unparseable]


def _extract_json_from_text(text: str) -> str:
    """Extract the outermost JSON value from a response that may include markdown or extra text."""
    text = (text or "").strip()

    if "```" in text:
        match = re.search(r"```(?:json)?\s*([\[{].*?[\]}])\s*```", text, flags=re.DOTALL)
        if match:
            return match.group(1)
        text = re.sub(r"```(?:json)?", "", text).strip()

    if text.startswith("["):
        match = re.search(r"\[.*\]", text, flags=re.DOTALL)
        return match.group(0) if match else text

    match = re.search(r"\{.*\}", text, flags=re.DOTALL)
    return match.group(0) if match else text


def _loads(json_text: str) -> Any:
    try:
        return json.loads(json_text)
    except json.JSONDecodeError:
        repaired = re.sub(r",\s*([}\]])", r"\1", json_text)
        return json.loads(repaired)


def _offer_dicts(items: List[Any]) -> List[Dict[str, Any]]:
    return [item for item in items if isinstance(item, dict)]


def inspect_payload(data: Any) -> ParsedPayload:
    """Decide the payload variant of already-decoded JSON."""
    if isinstance(data, dict):
        offers = data.get("offers")
        if isinstance(offers, list):
            return MultiOffer(_offer_dicts(offers))
        if data.get("fournisseur"):
            return SingleOffer(data)
        if OFFER_KEYS & data.keys():
            return SingleOffer(data)
        return Unparseable(f"JSON object without offer fields: {sorted(data)[:10]}")

    if isinstance(data, list):
        offers = _offer_dicts(data)
        if offers:
            return MultiOffer(offers)
        return Unparseable("JSON list without offer objects")

    return Unparseable(f"Unexpected JSON value of type {type(data).__name__}")


def parse_payload(raw_response: str) -> ParsedPayload:
    """Parse completion text into a ParsedPayload; never raises."""
    if not raw_response or not raw_response.strip():
        return Unparseable("empty response")

    json_text = _extract_json_from_text(raw_response)
    try:
        data = _loads(json_text)
    except json.JSONDecodeError as e:
        return Unparseable(f"invalid JSON at position {e.pos}: {e.msg}")

    return inspect_payload(data)


def payload_offers(payload: ParsedPayload) -> List[Dict[str, Any]]:
    """Candidate offer dicts of a parsed payload (empty for Unparseable)."""
    if isinstance(payload, MultiOffer):
        return list(payload.offers)
    if isinstance(payload, SingleOffer):
        return [payload.offer]
    return []
