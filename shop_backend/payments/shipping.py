"""
Adresse de livraison à plat (ship_to) à partir des détails client/livraison Stripe.
"""
from typing import Any, Dict, Optional

SEGMENT_SEPARATOR = ", "

# module shop_backend.payments.shipping
def ship_to_text(shipping: Optional[Dict[str, Any]], customer: Optional[Dict[str, Any]]) -> str:
    """
    Concatène dans l'ordre: nom, lignes de rue, code postal + ville, état + pays.
    - L'adresse de livraison prime sur l'adresse de facturation.
    - Segments vides ignorés.
    """
    shipping = shipping or {}
    customer = customer or {}
    address = shipping.get("address") or customer.get("address") or {}
    segments = [
        (shipping.get("name") or customer.get("name") or "").strip(),
        " ".join(p for p in (address.get("line1"), address.get("line2")) if p),
        " ".join(p for p in (address.get("postal_code"), address.get("city")) if p),
        " ".join(p for p in (address.get("state"), address.get("country")) if p),
    ]
    return SEGMENT_SEPARATOR.join(s for s in segments if s)
