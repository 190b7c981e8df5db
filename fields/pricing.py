"""
Annual budget computation and ranking of tariff offers.

For a yearly consumption C (MWh):
- variable = C * (prixMolecule + cee + transport + ticgn)      (€/MWh components)
- fixes    = abonnementF + distribution + transportAnn + cta    (€/year components)
- HT       = variable + fixes
- TTC      = fixes * (1 + TVA fixes) + variable * (1 + TVA variables)

Offers are ranked by ascending TTC; rank 1 is the cheapest.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from config import DEFAULT_CONSUMPTION_MWH, DEFAULT_TVA_FIXE, DEFAULT_TVA_VAR
from domain.canonical import NUMERIC_FIELDS, ExtractedOffer

from .normalization import normalize_number

VARIABLE_FIELDS = ("prixMolecule", "cee", "transport", "ticgn")
FIXED_FIELDS = ("abonnementF", "distribution", "transportAnn", "cta")

COMPARISON_COLUMNS = {
    "rank": "Rank",
    "fournisseur": "Supplier",
    "typeContrat": "Contract",
    "prixMolecule": "Molecule (€/MWh)",
    "variable": "Variable (€)",
    "fixes": "Fixed (€)",
    "ht": "HT (€)",
    "ttc": "TTC (€)",
    "sourceFile": "Source",
}


def _sum_fields(offer: Mapping[str, Any], fields: Iterable[str]) -> float:
    return sum(normalize_number(offer.get(f)) for f in fields)


def compute_costs(
    offer: Mapping[str, Any],
    consumption: float = DEFAULT_CONSUMPTION_MWH,
    tva_fixe: float = DEFAULT_TVA_FIXE,
    tva_var: float = DEFAULT_TVA_VAR,
) -> Dict[str, Any]:
    """Return a copy of `offer` with variable, fixes, ht and ttc (€/year) added."""
    variable = consumption * _sum_fields(offer, VARIABLE_FIELDS)
    fixes = _sum_fields(offer, FIXED_FIELDS)

    costed = dict(offer)
    costed["variable"] = variable
    costed["fixes"] = fixes
    costed["ht"] = variable + fixes
    costed["ttc"] = fixes * (1 + tva_fixe) + variable * (1 + tva_var)
    return costed


def matches_query(offer: Mapping[str, Any], query: str) -> bool:
    """Case-insensitive search on supplier name and contract type."""
    q = (query or "").strip().lower()
    if not q:
        return True
    haystack = " ".join([str(offer.get("fournisseur", "")), str(offer.get("typeContrat", ""))])
    return q in haystack.lower()


def rank_offers(
    offers: Iterable[Mapping[str, Any]],
    consumption: float = DEFAULT_CONSUMPTION_MWH,
    tva_fixe: float = DEFAULT_TVA_FIXE,
    tva_var: float = DEFAULT_TVA_VAR,
    query: str = "",
) -> List[Dict[str, Any]]:
    """Filter, cost and sort offers by TTC; each result carries its 1-based rank."""
    costed = [
        compute_costs(o, consumption, tva_fixe, tva_var)
        for o in offers
        if matches_query(o, query)
    ]
    costed.sort(key=lambda o: o["ttc"])

    for rank, offer in enumerate(costed, start=1):
        offer["rank"] = rank
    return costed


def potential_savings(ranked: List[Mapping[str, Any]]) -> float:
    """TTC gap between the most expensive and the cheapest ranked offer."""
    if not ranked:
        return 0.0
    return ranked[-1]["ttc"] - ranked[0]["ttc"]


def comparison_frame(ranked: List[Mapping[str, Any]]) -> pd.DataFrame:
    """Tabular view of ranked offers with display column names."""
    df = pd.DataFrame(list(ranked), columns=list(COMPARISON_COLUMNS))
    return df.rename(columns=COMPARISON_COLUMNS)


def new_manual_offer() -> ExtractedOffer:
    """Blank row for manual entry in the comparison table."""
    return ExtractedOffer(
        id=str(uuid.uuid4()),
        fournisseur="Nouveau fournisseur",
        typeContrat="Fixe 12 mois",
        prixMolecule=0.0,
        cee=0.0,
        transport=0.0,
        abonnementF=0.0,
        distribution=0.0,
        transportAnn=0.0,
        cta=0.0,
        ticgn=0.0,
    )


def offers_from_frame(df: pd.DataFrame) -> List[ExtractedOffer]:
    """Edited offers table back to offers: bad or blank numbers -> 0, rows added in the table get an id."""
    df = df.copy()
    for field in NUMERIC_FIELDS:
        if field in df.columns:
            df[field] = pd.to_numeric(df[field], errors="coerce").fillna(0.0).astype(float)
    df = df.astype(object).where(df.notna(), None)

    offers = df.to_dict(orient="records")
    for offer in offers:
        if not offer.get("id"):
            offer["id"] = str(uuid.uuid4())
    return offers
