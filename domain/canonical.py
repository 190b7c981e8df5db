"""
Canonical types shared by the extraction pipeline.

ExtractedOffer is the normalized structure every extraction path (LLM response
or regex fallback) must produce. Its keys are the exact field names the model
is instructed to emit, so the same shape is used on the wire and in memory.

DocumentClass drives prompt selection only; it never changes the offer schema.
ProcessingStep is the progress event passed to the batch observer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, NotRequired, Optional, TypedDict


class ExtractedOffer(TypedDict):
    fournisseur: str
    typeContrat: str

    prixMolecule: float
    cee: float
    transport: float
    abonnementF: float
    distribution: float
    transportAnn: float
    cta: float
    ticgn: float

    consommationReference: NotRequired[float]

    sourceFile: NotRequired[str]
    id: NotRequired[str]


NUMERIC_FIELDS = (
    "prixMolecule",
    "cee",
    "transport",
    "abonnementF",
    "distribution",
    "transportAnn",
    "cta",
    "ticgn",
)


class DocumentClass(str, Enum):
    SINGLE_CONTRACT = "single_contract"
    BROKER_TABLE = "broker_table"
    COMPARISON_TABLE = "comparison_table"

    @property
    def is_multi_offer(self) -> bool:
        return self in (DocumentClass.BROKER_TABLE, DocumentClass.COMPARISON_TABLE)


@dataclass(frozen=True)
class RawDocument:
    file_name: str
    raw_text: str


@dataclass(frozen=True)
class ProcessingStep:
    step: str
    progress: float
    file_name: Optional[str] = None
    offers_found: Optional[int] = None
    level: str = "info"  # info | warning | error


@dataclass
class BatchResult:
    """Offers of a persisted batch, with the progress trail and non-fatal warnings."""

    offers: List[ExtractedOffer]
    steps: List[ProcessingStep]
    warnings: List[str]
