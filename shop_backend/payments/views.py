"""
Endpoints de paiement (transport mince au-dessus de payments.service).
- POST /create-checkout-session: panier -> session Stripe Checkout (rate-limité).
- POST /confirm-order: confirmation sans webhook, idempotente.
- GET /debug-cart: lecture brute du panier d'un propriétaire (diagnostic).
Les erreurs métier (CheckoutError) sont converties en JSON par app_setup.exceptions.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shop_backend.cart import repository as cart_repository
from shop_backend.cart.models import OWNER_USER, OWNER_SESSION
from shop_backend.utils.rate_limit import optional_rate_limit
from shop_backend.payments import service as payments_service
from shop_backend.payments.errors import CheckoutError, InternalError, MissingOwner

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments API"])


class CheckoutSessionRequest(BaseModel):
    ownerType: Optional[str] = None
    ownerId: Optional[str] = None
    currency: Optional[str] = None
    successUrl: Optional[str] = None
    cancelUrl: Optional[str] = None


class ConfirmOrderRequest(BaseModel):
    session_id: Optional[str] = None


# module shop_backend.payments.views
@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(body: CheckoutSessionRequest) -> Dict[str, Any]:
    """
    Crée une session Checkout Stripe pour le panier du propriétaire.
    - Entrée JSON: {ownerType: "user"|"session", ownerId, currency?, successUrl?, cancelUrl?}
    - Sortie: {"url": <checkout url>, "id": <session id>}
    - Erreurs: 400 si owner manquant, devise non autorisée, panier vide ou prix invalide
    """
    try:
        session = payments_service.build_checkout_session(
            owner_kind=body.ownerType,
            owner_id=body.ownerId,
            currency=body.currency,
            success_url=body.successUrl,
            cancel_url=body.cancelUrl,
        )
        return {"url": session.get("url"), "id": session.get("id")}
    except CheckoutError:
        raise
    except Exception as e:
        logger.exception("Erreur create_checkout_session")
        raise InternalError(str(e)) from e

@router.post("/confirm-order")
def confirm_order(body: ConfirmOrderRequest) -> Dict[str, Any]:
    """
    Confirme une commande sans webhook (idempotent):
    - vérifie la session auprès de Stripe (doit être 'paid')
    - si aucune commande n'existe pour la session, la crée et vide le panier
    - sinon répond ok sans doublon (alreadyProcessed=true)
    """
    try:
        result = payments_service.confirm_order(body.session_id)
    except CheckoutError:
        raise
    except Exception as e:
        logger.exception("Erreur confirm_order session_id=%s", body.session_id)
        raise InternalError(str(e)) from e

    payload: Dict[str, Any] = {
        "ok": True,
        "alreadyProcessed": result["already_processed"],
        "orderId": result["order_id"],
    }
    if not result["already_processed"]:
        payload["orderCreated"] = True
    return payload

@router.get("/debug-cart")
def debug_cart(user_id: Optional[str] = None, session_id: Optional[str] = None):
    """
    Panier brut d'un utilisateur (user_id) ou d'une session anonyme (session_id).
    """
    if not user_id and not session_id:
        raise MissingOwner("user_id ou session_id manquant")
    if user_id:
        rows = cart_repository.read_raw_lines(OWNER_USER, user_id)
    else:
        rows = cart_repository.read_raw_lines(OWNER_SESSION, session_id)
    return JSONResponse(rows)
