"""
Logique panier pure (pas de Stripe, pas de DB).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List

from shop_backend.cart.models import CartLine
from .pricing import PricingEngine, to_decimal

DESCRIPTION_SEPARATOR = " - "

# module shop_backend.payments.cart
def describe_line(line: CartLine) -> str:
    """Description Stripe: marque et taille, parties vides ignorées."""
    return DESCRIPTION_SEPARATOR.join(p for p in (line.product_brand, line.size) if p)

def to_line_items(lines: Iterable[CartLine], currency: str, pricing: PricingEngine) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe (price_data, sans Products/Prices Stripe).
    - unit_amount calculé par le moteur de tarification (InvalidPrice si prix <= 0).
    - Au plus une image représentative par ligne.
    """
    line_items: List[Dict[str, Any]] = []
    for line in lines:
        product_data: Dict[str, Any] = {
            "name": line.product_name or "Product",
            "description": describe_line(line),
        }
        # Stripe refuse une description vide
        if not product_data["description"]:
            del product_data["description"]
        if line.image_ref:
            product_data["images"] = [line.image_ref]
        line_items.append({
            "quantity": line.quantity,
            "price_data": {
                "currency": currency,
                "product_data": product_data,
                "unit_amount": pricing.price_line(line.unit_price_base, currency),
            },
        })
    return line_items

def amount_base(lines: Iterable[CartLine]) -> Decimal:
    """
    Somme prix_base * quantité (devise de base). Un prix manquant compte pour 0:
    le paiement est déjà encaissé, la commande doit être enregistrée quand même.
    """
    total = Decimal(0)
    for line in lines:
        price = to_decimal(line.unit_price_base) or Decimal(0)
        total += price * line.quantity
    return total

def format_amount(value: Any) -> str:
    """Montant décimal sérialisé avec deux décimales (ex: '130.00')."""
    d = to_decimal(value) or Decimal(0)
    return str(d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

def line_item_snapshot(line: CartLine) -> Dict[str, Any]:
    return {
        "product_id": line.product_ref,
        "name": line.product_name,
        "brand": line.product_brand,
        "price": format_amount(line.unit_price_base) if line.unit_price_base is not None else None,
        "quantity": line.quantity,
        "size": line.size,
        "image": line.image_ref,
    }
