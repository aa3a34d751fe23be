# shop_backend.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du service de paiement.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env) sans écraser l'environnement
- Normalise et expose les secrets/URLs (Supabase, Stripe), CORS/hosts
- Expose les paramètres de tarification (devise de base, devise alternative, taux de change)
- Fournit les URLs de redirection par défaut du checkout
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _split_env(v: str) -> list:
    return [p.strip() for p in _clean_env(v).split(",") if p.strip()]

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_API_VERSION = _clean_env(os.getenv("STRIPE_API_VERSION") or "2024-06-20")

# Tarification: prix stockés en devise de base, conversion vers la devise alternative
BASE_CURRENCY = _clean_env(os.getenv("BASE_CURRENCY") or "mxn").lower()
QUOTE_CURRENCY = _clean_env(os.getenv("QUOTE_CURRENCY") or "usd").lower()
USD_MXN_RATE = _clean_env(os.getenv("USD_MXN_RATE") or "17.0")  # 1 USD = 17 MXN

# Collecte de l'adresse de livraison (exactement deux pays)
SHIPPING_COUNTRIES = [c.upper() for c in _split_env(os.getenv("SHIPPING_COUNTRIES") or "MX,US")]

# Front: pages de succès/annulation du checkout
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:5173").rstrip("/")
CHECKOUT_SUCCESS_URL = f"{FRONTEND_URL}/success?session_id={{CHECKOUT_SESSION_ID}}"
CHECKOUT_CANCEL_URL = f"{FRONTEND_URL}/cart"

# CORS / hosts
CORS_ORIGINS = _split_env(os.getenv("CORS_ORIGINS") or os.getenv("CORS_ORIGIN") or "http://localhost:5173")
ALLOWED_HOSTS = _split_env(os.getenv("ALLOWED_HOSTS") or "*")
