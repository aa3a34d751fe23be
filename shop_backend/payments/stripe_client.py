"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

from shop_backend import config
from .errors import GatewayUnavailable, MalformedUpstreamResponse, SessionNotFound

logger = logging.getLogger(__name__)

# module shop_backend.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key et stripe.api_version depuis la configuration.
    - Soulève GatewayUnavailable si STRIPE_SECRET_KEY est absent.
    """
    if not config.STRIPE_SECRET_KEY:
        raise GatewayUnavailable("STRIPE_SECRET_KEY manquant")
    stripe.api_key = config.STRIPE_SECRET_KEY
    stripe.api_version = config.STRIPE_API_VERSION
    return stripe

def to_plain(obj: Any) -> Dict[str, Any]:
    """Objet Stripe -> dict récursif (les objets Stripe ne sont pas toujours des dict)."""
    if obj is None:
        return {}
    for attr in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)

def _is_missing(e: stripe.InvalidRequestError) -> bool:
    return getattr(e, "http_status", None) == 404 or getattr(e, "code", None) == "resource_missing"

def shipping_details(session: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Bloc livraison: shipping_details, ou collected_information.shipping_details (API récentes)."""
    shipping = session.get("shipping_details")
    if not shipping:
        shipping = (session.get("collected_information") or {}).get("shipping_details")
    return shipping or None

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, Any],
    shipping_countries: List[str],
    collect_phone: bool = True,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (paiement unique, carte).
    - success_url doit contenir {CHECKOUT_SESSION_ID} (substitué par Stripe)
    - metadata: {"ownerType", "ownerId", "currency"}
    Retour: {"id": "cs_test_...", "url": "https://..."}
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            payment_method_types=["card"],
            line_items=line_items,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            shipping_address_collection={"allowed_countries": shipping_countries},
            phone_number_collection={"enabled": collect_phone},
        )
    except stripe.StripeError as e:
        logger.exception("stripe_client.create_session failed")
        raise GatewayUnavailable(str(e)) from e
    data = to_plain(session)
    if not data.get("id") or not data.get("url"):
        raise MalformedUpstreamResponse("Session Stripe sans id/url")
    return {"id": data["id"], "url": data["url"]}

def get_session(session_id: str) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant (source de vérité).
    - SessionNotFound si Stripe ne connaît pas l'identifiant (404 / resource_missing).
    - GatewayUnavailable pour toute autre erreur Stripe (paramètre, version d'API, réseau...).
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.InvalidRequestError as e:
        if _is_missing(e):
            raise SessionNotFound("Session Stripe introuvable", session_id=session_id) from e
        logger.exception("stripe_client.get_session rejected session_id=%s", session_id)
        raise GatewayUnavailable(str(e)) from e
    except stripe.StripeError as e:
        logger.exception("stripe_client.get_session failed session_id=%s", session_id)
        raise GatewayUnavailable(str(e)) from e
    data = to_plain(session)
    if not data.get("id"):
        raise MalformedUpstreamResponse("Session Stripe sans id")
    return data
