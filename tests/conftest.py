# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import json

import pytest

from domain.errors import MissingCredentialError, StorageUnavailableError
from domain.upload import UploadedFile


SINGLE_CONTRACT_TEXT = """
CONTRAT DE FOURNITURE DE GAZ NATUREL
Fournisseur : ENGIE
Client : Boulangerie Martin, 12 rue des Lilas, 69003 Lyon
Durée : prix fixe 36 mois à compter du 01/01/2025
Prix de la molécule : 35,50 €/MWh
CEE : 8,20 €/MWh
Abonnement annuel : 6000 €
"""

COMPARISON_TABLE_TEXT = """
TABLEAU COMPARATIF DES OFFRES GAZ - Sélection courtier
Fournisseur | Durée | Prix molécule
ENGIE | Fixe 36 mois | 35,5 €/MWh
TotalEnergies | Fixe 24 mois | 37,8 €/MWh
ENGIE | Fixe 12 mois | 36,9 €/MWh
TotalEnergies | Fixe 12 mois | 38,1 €/MWh
Contacts : ENGIE Entreprises, TotalEnergies Gaz & Électricité
"""

TWO_OFFERS_RESPONSE = json.dumps({
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
            "prixMolecule": "37,8 €/MWh",
            "cee": 8.5,
            "transport": 8.69,
            "abonnementF": 150,
            "distribution": 5022.04,
            "transportAnn": 1231.08,
            "cta": 304.52,
            "ticgn": 17.16,
        },
    ]
})


class FakeCompletion:
    """Completion collaborator returning canned responses (or raising them)."""

    def __init__(self, *responses, configured=True):
        self.responses = list(responses)
        self.configured = configured
        self.calls = []

    def ensure_configured(self):
        if not self.configured:
            raise MissingCredentialError("OPENAI_API_KEY is not configured")

    def complete(self, system_prompt, user_prompt, options):
        self.calls.append({"system": system_prompt, "user": user_prompt, "options": options})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class RecordingStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []

    def persist_offers(self, offers, owner_id):
        if self.fail:
            raise StorageUnavailableError("database down")
        self.saved.append((owner_id, list(offers)))


def decode_text(file):
    return file.content.decode("utf-8")


def make_file(name, text, media_type="text/plain"):
    return UploadedFile(name=name, content=text.encode("utf-8"), media_type=media_type)


@pytest.fixture
def single_contract_text():
    return SINGLE_CONTRACT_TEXT


@pytest.fixture
def comparison_table_text():
    return COMPARISON_TABLE_TEXT


@pytest.fixture
def two_offers_response():
    return TWO_OFFERS_RESPONSE


@pytest.fixture
def progress_events():
    """List collecting ProcessingStep events, usable as an observer via .append."""
    return []
