"""
Accès aux données 'orders' (registre des commandes).
- find_by_stripe_session_id: contrôle d'idempotence (une commande par session Stripe).
- insert_order: insertion; l'index unique sur stripe_session_id est la seule garantie
  contre les doublons en cas de confirmations concurrentes.
"""
from typing import Any, Dict, Optional
import logging
from postgrest.exceptions import APIError
import shop_backend.infra.supabase_client as supabase_client
from shop_backend.payments.errors import DuplicateOrder, LedgerUnavailable, MalformedUpstreamResponse

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# module shop_backend.orders.repository
def _error_code(e: APIError) -> Optional[str]:
    code = getattr(e, "code", None)
    if not code and e.args and isinstance(e.args[0], dict):
        code = e.args[0].get("code")
    return str(code) if code else None

def is_unique_violation(e: Exception) -> bool:
    """
    Distingue « quelqu'un a déjà inséré cette session » de toute autre erreur d'insertion.
    - SQLSTATE 23505 si PostgREST le fournit, sinon repli sur le message « duplicate key ».
    - La contrainte violée doit porter sur stripe_session_id (message ou details):
      un doublon sur orders_pkey ou un autre index unique reste une erreur du registre.
    """
    text = " ".join(
        str(part) for part in (getattr(e, "message", None), getattr(e, "details", None), e) if part
    ).lower()
    if "stripe_session_id" not in text:
        return False
    if isinstance(e, APIError) and _error_code(e) == UNIQUE_VIOLATION:
        return True
    return "duplicate key" in text

def find_by_stripe_session_id(stripe_session_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("id, stripe_session_id, status")
            .eq("stripe_session_id", stripe_session_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.find_by_stripe_session_id failed stripe_session_id=%s", stripe_session_id)
        raise LedgerUnavailable(str(e)) from e
    rows = res.data or []
    return rows[0] if rows else None

def insert_order(order: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère la commande et retourne la ligne créée (au minimum {"id": ...}).
    - DuplicateOrder si la contrainte unique stripe_session_id est violée.
    - LedgerUnavailable pour toute autre erreur.
    """
    sid = order.get("stripe_session_id")
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .insert(order)
            .execute()
        )
    except Exception as e:
        if is_unique_violation(e):
            raise DuplicateOrder(sid) from e
        logger.exception("orders.repository.insert_order failed stripe_session_id=%s", sid)
        raise LedgerUnavailable(str(e)) from e
    rows = res.data or []
    row = rows[0] if isinstance(rows, list) and rows else rows
    if not isinstance(row, dict) or not row.get("id"):
        raise MalformedUpstreamResponse(f"Insertion sans id retourné (stripe_session_id={sid})")
    return row
