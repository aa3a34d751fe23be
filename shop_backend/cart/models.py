"""
Lignes de panier (lecture seule pour le checkout).
Une ligne Supabase a la forme:
  {"quantity": 2, "size": "M", "product": {"id", "name", "brand", "price", "image_urls": [...]}}
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

OWNER_USER = "user"
OWNER_SESSION = "session"
OWNER_KINDS = (OWNER_USER, OWNER_SESSION)

# Colonne du panier/commande selon le type de propriétaire
OWNER_COLUMNS = {OWNER_USER: "user_id", OWNER_SESSION: "session_id"}


def owner_column(owner_kind: str) -> str:
    try:
        return OWNER_COLUMNS[owner_kind]
    except KeyError:
        raise ValueError(f"ownerType inconnu: {owner_kind!r}")


@dataclass(frozen=True)
class CartLine:
    owner_kind: str
    owner_id: str
    product_ref: Optional[str]
    quantity: int
    unit_price_base: Any
    product_name: Optional[str] = None
    product_brand: Optional[str] = None
    size: Optional[str] = None
    image_ref: Optional[str] = None

    @classmethod
    def from_row(cls, owner_kind: str, owner_id: str, row: Dict[str, Any]) -> "CartLine":
        product = row.get("product") or {}
        images = product.get("image_urls") or []
        return cls(
            owner_kind=owner_kind,
            owner_id=owner_id,
            product_ref=product.get("id"),
            quantity=int(row.get("quantity") or 1),
            unit_price_base=product.get("price"),
            product_name=product.get("name"),
            product_brand=product.get("brand"),
            size=row.get("size"),
            image_ref=images[0] if images else None,
        )
