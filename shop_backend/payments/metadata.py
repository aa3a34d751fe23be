"""
Sérialisation/désérialisation des métadonnées Stripe (ownerType, ownerId, currency).
La confirmation ne fait confiance qu'à ces métadonnées, relues depuis Stripe,
jamais aux champs envoyés par le client.
"""
from typing import Any, Dict, Optional, Tuple

from shop_backend.cart.models import OWNER_KINDS
from .errors import MissingOwnerMetadata

# module shop_backend.payments.metadata
def make_metadata(owner_kind: str, owner_id: str, currency: str) -> Dict[str, str]:
    return {"ownerType": owner_kind, "ownerId": owner_id, "currency": currency}

def extract_owner_metadata(session: Dict[str, Any], default_currency: Optional[str] = None) -> Tuple[str, str, str]:
    """
    Extrait (owner_kind, owner_id, currency) d'une session Checkout.
    - currency: metadata.currency, sinon session.currency, sinon la devise par défaut; en minuscules.
    - Soulève MissingOwnerMetadata si ownerType/ownerId manquent (session non créée par ce service).
    """
    meta = (session or {}).get("metadata") or {}
    owner_kind = meta.get("ownerType")
    owner_id = meta.get("ownerId")
    if not owner_kind or not owner_id or owner_kind not in OWNER_KINDS:
        raise MissingOwnerMetadata("Métadonnées owner manquantes dans la session", session_id=(session or {}).get("id"))
    currency = (meta.get("currency") or (session or {}).get("currency") or default_currency or "").lower()
    return owner_kind, owner_id, currency
