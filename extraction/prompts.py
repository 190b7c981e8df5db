import json

from config import MAX_PROMPT_TEXT_CHARS
from domain.canonical import DocumentClass

EXTRACTION_SYSTEM_PROMPT = """
You are an expert in French energy supply contracts with 20 years of experience.
You extract gas tariff offers from contracts, broker tables and comparison tables.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
FRENCH SUPPLIERS (use these EXACT names)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- ENGIE (never GDF, GDF Suez)
- TotalEnergies (never "Total Direct Energie" alone)
- EDF
- Ekwateur
- Vattenfall
- ENI
- Dyneff
- Gaz de Bordeaux
- Planète OUI
- Mint Energie
- Alpiq
- Antargaz
- Gaz Européen

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
MISSION
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- Extract ALL offers present, even inside complex tables
- ONE ROW = ONE OFFER
- If the document is a comparison or broker table, find every distinct row/offer

Return ONLY valid JSON with the exact field names requested.
"""

_SINGLE_OFFER_EXAMPLE = {
    "fournisseur": "exact name",
    "typeContrat": "Fixe XX mois",
    "prixMolecule": 0,
    "cee": 0,
    "transport": 8.69,
    "abonnementF": 0,
    "distribution": 5022.04,
    "transportAnn": 1231.08,
    "cta": 304.52,
    "ticgn": 17.16,
    "consommationReference": 0,
}

_MULTI_OFFER_EXAMPLE = {
    "offers": [
        {
            "fournisseur": "ENGIE",
            "typeContrat": "Fixe 36 mois",
            "prixMolecule": 35.5,
            "cee": 8.2,
            "transport": 8.69,
            "abonnementF": 6000,
            "distribution": 5022.04,
            "transportAnn": 1231.08,
            "cta": 304.52,
            "ticgn": 17.16,
            "consommationReference": 360,
        },
        {
            "fournisseur": "TotalEnergies",
            "typeContrat": "Fixe 24 mois",
            "prixMolecule": 37.8,
            "cee": 8.5,
            "transport": 8.69,
            "abonnementF": 150,
            "distribution": 5022.04,
            "transportAnn": 1231.08,
            "cta": 304.52,
            "ticgn": 17.16,
            "consommationReference": 360,
        },
    ]
}


def build_extraction_prompt(text: str, file_name: str, doc_class: DocumentClass) -> str:
    text_preview = (text or "")[:MAX_PROMPT_TEXT_CHARS]

    base_prompt = f"""
DOCUMENT: {file_name}
DETECTED TYPE: {doc_class.value}

CONTENT TO ANALYSE:
{text_preview}

INSTRUCTIONS:
1. SUPPLIERS: identify the French supplier names precisely
2. PRICES: convert everything to €/MWh (if ct€/kWh: divide by 10 to get €/MWh)
3. TABLES: if the document is a table, extract EACH distinct row
4. SEARCH: look for every tariff, even when scattered across the document
5. VALIDATION: only return offers with real data (never all zeros)
""".strip()

    if doc_class.is_multi_offer:
        schema = json.dumps(_MULTI_OFFER_EXAMPLE, indent=2, ensure_ascii=False)
        return f"""
{base_prompt}

IMPORTANT: this document contains SEVERAL offers.
Extract EVERY distinct row/supplier found, one object per offer in "offers".

Expected JSON format:
{schema}
""".strip()

    schema = json.dumps(_SINGLE_OFFER_EXAMPLE, indent=2, ensure_ascii=False)
    return f"""
{base_prompt}

JSON format for a single offer:
{schema}
""".strip()
