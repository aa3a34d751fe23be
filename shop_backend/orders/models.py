"""
Construction de la ligne 'orders' à partir de la session Stripe et du panier lu à la confirmation.
Les snapshots (client, livraison, articles) sont dénormalisés: la commande ne dépend plus
du panier ni des produits après insertion.
"""
from typing import Any, Dict, Iterable, Optional

from shop_backend.cart.models import CartLine, OWNER_USER, OWNER_SESSION
from shop_backend.payments.cart import amount_base, format_amount, line_item_snapshot

STATUS_PAID = "paid"


def build_order(
    *,
    owner_kind: str,
    owner_id: str,
    stripe_session_id: str,
    currency: str,
    lines: Iterable[CartLine],
    customer: Optional[Dict[str, Any]] = None,
    shipping: Optional[Dict[str, Any]] = None,
    ship_to: str = "",
) -> Dict[str, Any]:
    lines = list(lines)
    return {
        "user_id": owner_id if owner_kind == OWNER_USER else None,
        "session_id": owner_id if owner_kind == OWNER_SESSION else None,
        "stripe_session_id": stripe_session_id,
        "currency": currency,
        # Total comptable en devise de base, indépendant de la devise encaissée
        "amount": format_amount(amount_base(lines)),
        "status": STATUS_PAID,
        "customer": customer,
        "shipping": shipping,
        "ship_to": ship_to,
        "items": [line_item_snapshot(line) for line in lines],
    }
