"""
Offer persistence (append-only, per owner) and the current-user provider.

Offers are stored in a JSON file per owner under `OFFER_STORE_DIR`:
`<dir>/<owner_id>.json` holding `{"offers": [...]}`.

Key behaviors:
- `persist_offers` appends to what is already stored; it never rewrites earlier offers.
- A missing file means "no offers yet".
- State is written via a temporary file and then replaced to reduce corruption risk.
- Any I/O or format problem is reported as StorageUnavailableError; the
  pipeline treats that as a non-fatal warning.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from config import OFFER_STORE_DIR
from domain.canonical import ExtractedOffer
from domain.errors import StorageUnavailableError, UnauthenticatedError

_SAFE_OWNER = re.compile(r"[^A-Za-z0-9_.-]")


class OfferStore(Protocol):
    def persist_offers(self, offers: Sequence[ExtractedOffer], owner_id: str) -> None: ...


class UserProvider(Protocol):
    def current_user(self) -> Dict[str, Any]: ...


class JsonOfferStore:
    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else OFFER_STORE_DIR

    def _state_path(self, owner_id: str) -> Path:
        """Return the JSON file holding the offers of `owner_id`."""
        safe_owner = _SAFE_OWNER.sub("_", owner_id)
        return self.root / f"{safe_owner}.json"

    def load_offers(self, owner_id: str) -> List[ExtractedOffer]:
        """Load and validate the stored offers of `owner_id`."""
        state_path = self._state_path(owner_id)
        if not state_path.exists():
            return []

        try:
            raw = json.loads(state_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUnavailableError(f"Failed to read/parse offer store: {state_path}") from e

        if not isinstance(raw, dict) or not isinstance(raw.get("offers"), list):
            raise StorageUnavailableError(
                f"Invalid offer store format in {state_path}. Expected {{\"offers\": [...]}}"
            )
        return raw["offers"]

    def persist_offers(self, offers: Sequence[ExtractedOffer], owner_id: str) -> None:
        """Append `offers` to the owner's store (write-temp-then-replace)."""
        stored = self.load_offers(owner_id)
        stored.extend(dict(o) for o in offers)

        state_path = self._state_path(owner_id)
        tmp_path = state_path.with_suffix(".tmp")
        payload = {"offers": stored}

        try:
            state_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(state_path)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to write offer store: {state_path}") from e


class StaticUserProvider:
    """Current-user provider for a single local user (no authentication flow)."""

    def __init__(self, user_id: Optional[str]):
        self.user_id = user_id

    def current_user(self) -> Dict[str, Any]:
        if not self.user_id or not str(self.user_id).strip():
            raise UnauthenticatedError("No current user")
        return {"id": str(self.user_id).strip()}
