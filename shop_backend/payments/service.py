"""
Cas d'usage 'payments': orchestre tarification, panier, Stripe et registre des commandes.

1) build_checkout_session: panier du propriétaire -> session Stripe Checkout (aucune écriture locale).
2) confirm_order: session Stripe payée -> exactement une commande, puis panier vidé.

confirm_order est idempotent et sûr en concurrence sans verrou applicatif:
- relecture de la commande existante par stripe_session_id (rejeu séquentiel);
- l'index unique orders.stripe_session_id tranche les courses (DuplicateOrder absorbé).
État dérivé à chaque appel: UNPAID -> PAID_UNCONFIRMED -> CONFIRMED (terminal).
"""
import logging
from typing import Any, Dict, Optional

from shop_backend import config
from shop_backend.cart import repository as cart_repository
from shop_backend.cart.models import OWNER_KINDS
from shop_backend.orders import repository as orders_repository
from shop_backend.orders import models as order_models
from . import cart as cart_logic
from . import stripe_client
from . import metadata as meta
from .errors import (
    DuplicateOrder,
    EmptyCart,
    InputError,
    LedgerUnavailable,
    MissingOwner,
    MissingSessionId,
    PaymentNotCompleted,
)
from .pricing import PricingEngine, get_pricing_engine
from .shipping import ship_to_text

logger = logging.getLogger(__name__)

PAID = "paid"

def build_checkout_session(
    *,
    owner_kind: Optional[str],
    owner_id: Optional[str],
    currency: Optional[str] = None,
    success_url: Optional[str] = None,
    cancel_url: Optional[str] = None,
    pricing: Optional[PricingEngine] = None,
) -> Dict[str, Any]:
    """
    Prépare la session Stripe à partir du panier du propriétaire.
    - Valide owner et devise avant tout appel externe.
    - EmptyCart si le panier est vide.
    - metadata {ownerType, ownerId, currency}: seule source de vérité pour la confirmation.
    Retour: {"url", "id"} tels que fournis par Stripe.
    """
    if not owner_kind or not owner_id:
        raise MissingOwner("ownerType et ownerId sont requis")
    if owner_kind not in OWNER_KINDS:
        raise InputError(f"ownerType invalide: {owner_kind}", code="invalid_owner_type")

    pricing = pricing or get_pricing_engine()
    curr = pricing.validate_currency(currency)

    lines = cart_repository.read_lines(owner_kind, owner_id)
    if not lines:
        raise EmptyCart("Panier vide")

    line_items = cart_logic.to_line_items(lines, curr, pricing)
    session = stripe_client.create_session(
        line_items=line_items,
        success_url=success_url or config.CHECKOUT_SUCCESS_URL,
        cancel_url=cancel_url or config.CHECKOUT_CANCEL_URL,
        metadata=meta.make_metadata(owner_kind, owner_id, curr),
        shipping_countries=config.SHIPPING_COUNTRIES,
        collect_phone=True,
    )
    logger.info(
        "payments.checkout session_id=%s owner=%s:%s currency=%s lines=%s",
        session.get("id"), owner_kind, owner_id, curr, len(lines),
    )
    return session

def confirm_order(session_id: Optional[str]) -> Dict[str, Any]:
    """
    Convertit une session Stripe payée en exactement une commande.
    Retour: {"already_processed": bool, "order_id": <id|None>}
    Erreurs: SessionNotFound, PaymentNotCompleted, MissingOwnerMetadata (aucune mutation),
    GatewayUnavailable / LedgerUnavailable / CartStoreUnavailable (réessai sûr côté appelant).
    """
    if not session_id:
        raise MissingSessionId("session_id manquant")

    # 1-3) Vérifications pures: Stripe fait foi
    session = stripe_client.get_session(session_id)
    payment_status = session.get("payment_status")
    if payment_status != PAID:
        raise PaymentNotCompleted(payment_status)

    owner_kind, owner_id, currency = meta.extract_owner_metadata(session, default_currency=config.BASE_CURRENCY)
    stripe_session_id = session["id"]

    # 4) Idempotence: commande déjà enregistrée pour cette session
    existing = orders_repository.find_by_stripe_session_id(stripe_session_id)
    if existing:
        logger.info("payments.confirm already_processed session_id=%s order_id=%s", stripe_session_id, existing.get("id"))
        return {"already_processed": True, "order_id": existing.get("id")}

    # 5-7) Snapshot du panier courant et de l'adresse
    lines = cart_repository.read_lines(owner_kind, owner_id)
    customer = session.get("customer_details") or None
    shipping = stripe_client.shipping_details(session)
    order = order_models.build_order(
        owner_kind=owner_kind,
        owner_id=owner_id,
        stripe_session_id=stripe_session_id,
        currency=currency,
        lines=lines,
        customer=customer,
        shipping=shipping,
        ship_to=ship_to_text(shipping, customer),
    )

    # 8-9) Insertion; la contrainte unique départage les confirmations concurrentes
    try:
        row = orders_repository.insert_order(order)
    except DuplicateOrder:
        winner = _find_winner(stripe_session_id)
        logger.info("payments.confirm race_absorbed session_id=%s order_id=%s", stripe_session_id, winner)
        return {"already_processed": True, "order_id": winner}

    # 10) Vider le panier, uniquement pour le gagnant; un échec laisse un panier périmé, pas un doublon
    try:
        cart_repository.delete_lines(owner_kind, owner_id)
    except Exception:
        logger.warning(
            "payments.confirm cart_not_cleared session_id=%s owner=%s:%s",
            stripe_session_id, owner_kind, owner_id, exc_info=True,
        )

    logger.info(
        "payments.confirm order_created session_id=%s order_id=%s amount=%s currency=%s items=%s",
        stripe_session_id, row["id"], order["amount"], currency, len(order["items"]),
    )
    return {"already_processed": False, "order_id": row["id"]}

def _find_winner(stripe_session_id: str) -> Optional[Any]:
    """
    Id de la commande insérée par la requête concurrente.
    - None si la relecture elle-même échoue (la commande existe, seul son id manque).
    - LedgerUnavailable si la relecture aboutit sans ligne: un doublon sans commande visible
      n'est pas un succès.
    """
    try:
        existing = orders_repository.find_by_stripe_session_id(stripe_session_id)
    except Exception:
        logger.warning("payments.confirm winner_lookup_failed session_id=%s", stripe_session_id, exc_info=True)
        return None
    if not existing:
        logger.error("payments.confirm duplicate_without_order session_id=%s", stripe_session_id)
        raise LedgerUnavailable(f"Doublon signalé sans commande pour {stripe_session_id}")
    return existing.get("id")
