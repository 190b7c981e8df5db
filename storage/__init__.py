from .offer_store import JsonOfferStore, OfferStore, StaticUserProvider, UserProvider

__all__ = ["JsonOfferStore", "OfferStore", "StaticUserProvider", "UserProvider"]
