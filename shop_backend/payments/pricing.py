"""
Moteur de tarification (pur: pas de Stripe, pas de DB).
- Les prix produits sont stockés en devise de base (MXN par défaut).
- La devise alternative (USD par défaut) est dérivée via un taux fixe: prix_base / taux.
- Montants Stripe en unités mineures (centimes), arrondi au plus proche, demi vers l'extérieur,
  ligne par ligne (aucun arrondi a posteriori sur les totaux).
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, FrozenSet, Optional

from .errors import InvalidPrice, UnsupportedCurrency

_CENT = Decimal(100)


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convertit un prix (str|int|float|Decimal) en Decimal.
    - Retourne None si vide ou non parsable.
    - Les floats passent par str() pour éviter les artefacts binaires (12.3 -> "12.3").
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


@dataclass(frozen=True)
class PricingConfig:
    base_currency: str = "mxn"
    quote_currency: str = "usd"
    rate: Decimal = Decimal("17.0")

    def __post_init__(self):
        rate = to_decimal(self.rate)
        if rate is None or rate <= 0:
            raise ValueError(f"Taux de change invalide: {self.rate!r}")
        object.__setattr__(self, "rate", rate)
        object.__setattr__(self, "base_currency", self.base_currency.lower())
        object.__setattr__(self, "quote_currency", self.quote_currency.lower())

    @property
    def allowed_currencies(self) -> FrozenSet[str]:
        return frozenset({self.base_currency, self.quote_currency})

    @classmethod
    def from_env(cls) -> "PricingConfig":
        from shop_backend import config
        return cls(
            base_currency=config.BASE_CURRENCY,
            quote_currency=config.QUOTE_CURRENCY,
            rate=config.USD_MXN_RATE,
        )


class PricingEngine:
    def __init__(self, config: PricingConfig):
        self.config = config

    @property
    def base_currency(self) -> str:
        return self.config.base_currency

    def validate_currency(self, currency: Optional[str]) -> str:
        """
        Normalise la devise demandée (minuscules, base par défaut).
        Soulève UnsupportedCurrency si elle n'est pas dans {base, alternative}.
        """
        curr = (currency or self.config.base_currency).strip().lower()
        if curr not in self.config.allowed_currencies:
            allowed = ", ".join(sorted(self.config.allowed_currencies))
            raise UnsupportedCurrency(f"Devise non autorisée ({allowed})", currency=curr)
        return curr

    def price_line(self, unit_price_base: Any, currency: str) -> int:
        """
        Montant unitaire en unités mineures de la devise de checkout.
        - base: round(prix * 100)
        - alternative: round((prix / taux) * 100)
        """
        curr = self.validate_currency(currency)
        price = to_decimal(unit_price_base)
        if price is None or price <= 0:
            raise InvalidPrice("Produit sans prix positif en devise de base", price=str(unit_price_base))
        if curr == self.config.quote_currency and curr != self.config.base_currency:
            price = price / self.config.rate
        return int((price * _CENT).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def get_pricing_engine() -> PricingEngine:
    return PricingEngine(PricingConfig.from_env())
