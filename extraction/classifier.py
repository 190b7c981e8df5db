"""
Heuristic document-shape detection.

Counts supplier-name mentions and looks for table/broker vocabulary to decide
whether a document is a single contract or lists several offers. The result
only selects the prompt variant.
"""

from __future__ import annotations

from domain.canonical import DocumentClass

SUPPLIER_MENTIONS = ("engie", "totalenergies", "total energies", "edf", "ekwateur", "vattenfall", "eni")
TABLE_KEYWORDS = ("tableau", "comparatif", "offre", "proposition", "courtier", "sélection")


def count_supplier_mentions(text: str) -> int:
    lower = (text or "").lower()
    return sum(lower.count(name) for name in SUPPLIER_MENTIONS)


def has_table_keywords(text: str) -> bool:
    lower = (text or "").lower()
    return any(keyword in lower for keyword in TABLE_KEYWORDS)


def classify(text: str) -> DocumentClass:
    """
    Classify raw document text.

    More than 5 supplier mentions, or any table keyword -> comparison table.
    More than 2 mentions -> broker table. Otherwise -> single contract.
    """
    mention_count = count_supplier_mentions(text)

    if mention_count > 5 or has_table_keywords(text):
        return DocumentClass.COMPARISON_TABLE
    if mention_count > 2:
        return DocumentClass.BROKER_TABLE
    return DocumentClass.SINGLE_CONTRACT
