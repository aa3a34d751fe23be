"""
Module 'payments' (feature-first): point d'entrée public.
Réunit tarification, logique panier, metadata Stripe, client Stripe et cas d'usage.
"""

from .pricing import PricingConfig, PricingEngine, get_pricing_engine
from .cart import to_line_items, amount_base, line_item_snapshot
from .metadata import make_metadata, extract_owner_metadata
from .shipping import ship_to_text
from .stripe_client import require_stripe, create_session, get_session
from .service import build_checkout_session, confirm_order

__all__ = [
    # tarification
    "PricingConfig",
    "PricingEngine",
    "get_pricing_engine",
    # cart
    "to_line_items",
    "amount_base",
    "line_item_snapshot",
    # metadata
    "make_metadata",
    "extract_owner_metadata",
    # livraison
    "ship_to_text",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    # services
    "build_checkout_session",
    "confirm_order",
]
