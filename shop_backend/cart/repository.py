"""
Accès aux données 'cart' (Cart Store).
- read_lines: lignes du propriétaire avec jointure produit (prix en devise de base).
- read_raw_lines: lignes brutes (diagnostic /debug-cart).
- delete_lines: vide le panier du propriétaire.
Les erreurs Supabase remontent en CartStoreUnavailable: un panier illisible ne doit pas
être confondu avec un panier vide.
"""
from typing import Any, Dict, List
import logging
import shop_backend.infra.supabase_client as supabase_client
from shop_backend.cart.models import CartLine, owner_column
from shop_backend.payments.errors import CartStoreUnavailable

logger = logging.getLogger(__name__)

CART_SELECT = "quantity, size, product:product_id(id, name, brand, price, image_urls)"

# module shop_backend.cart.repository
def read_raw_lines(owner_kind: str, owner_id: str, select: str = "*") -> List[Dict[str, Any]]:
    column = owner_column(owner_kind)
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("cart")
            .select(select)
            .eq(column, owner_id)
            .execute()
        )
        return res.data or []
    except Exception as e:
        logger.exception("cart.repository.read_raw_lines failed %s=%s", column, owner_id)
        raise CartStoreUnavailable(str(e)) from e

def read_lines(owner_kind: str, owner_id: str) -> List[CartLine]:
    """
    Lignes du panier de (owner_kind, owner_id). Aucun ordre garanti.
    """
    rows = read_raw_lines(owner_kind, owner_id, select=CART_SELECT)
    return [CartLine.from_row(owner_kind, owner_id, row) for row in rows]

def delete_lines(owner_kind: str, owner_id: str) -> None:
    column = owner_column(owner_kind)
    try:
        (
            supabase_client.get_service_supabase()
            .table("cart")
            .delete()
            .eq(column, owner_id)
            .execute()
        )
    except Exception as e:
        logger.exception("cart.repository.delete_lines failed %s=%s", column, owner_id)
        raise CartStoreUnavailable(str(e)) from e
