"""
Erreurs métier de la feature 'payments'.

Taxonomie (visible par l'appelant):
- InputError: données client invalides (owner manquant, devise non permise, panier vide, prix invalide) -> 400
- UpstreamStateError: état Stripe incompatible (session introuvable, non payée, metadata absente) -> 400/404
- InternalError: Stripe/Supabase injoignable ou réponse inattendue -> 500 opaque, l'appelant peut réessayer
DuplicateOrder n'est jamais visible: la confirmation l'absorbe (course gagnée par une autre requête).
"""
from typing import Any, Dict, Optional


class CheckoutError(Exception):
    status_code = 400
    code = "checkout_error"

    def __init__(self, message: str, code: Optional[str] = None, **detail: Any):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.detail: Dict[str, Any] = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.detail}


# --- Erreurs d'entrée ---
class InputError(CheckoutError):
    code = "invalid_input"


class MissingOwner(InputError):
    code = "missing_owner"


class UnsupportedCurrency(InputError):
    code = "unsupported_currency"


class InvalidPrice(InputError):
    code = "invalid_price"


class EmptyCart(InputError):
    code = "empty_cart"


class MissingSessionId(InputError):
    code = "missing_session_id"


# --- État Stripe ---
class UpstreamStateError(CheckoutError):
    code = "upstream_state"


class SessionNotFound(UpstreamStateError):
    status_code = 404
    code = "session_not_found"


class PaymentNotCompleted(UpstreamStateError):
    code = "payment_not_completed"

    def __init__(self, payment_status: Optional[str]):
        super().__init__("La session n'est pas payée", status=payment_status)
        self.payment_status = payment_status


class MissingOwnerMetadata(UpstreamStateError):
    code = "missing_owner_metadata"


# --- Erreurs internes (opaques côté client) ---
class InternalError(CheckoutError):
    status_code = 500
    code = "internal"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": "internal"}


class GatewayUnavailable(InternalError):
    pass


class LedgerUnavailable(InternalError):
    pass


class CartStoreUnavailable(InternalError):
    pass


class MalformedUpstreamResponse(InternalError):
    pass


class DuplicateOrder(Exception):
    """Violation de l'unicité orders.stripe_session_id (SQLSTATE 23505)."""

    def __init__(self, stripe_session_id: str):
        super().__init__(f"Commande déjà enregistrée pour {stripe_session_id}")
        self.stripe_session_id = stripe_session_id
