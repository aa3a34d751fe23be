"""
Clients Supabase partagés, créés à la première utilisation.
- anon: diagnostics (/health/supabase) quand aucune clé service n'est fournie.
- service-role (bypass RLS): panier et registre des commandes côté serveur.
"""
from typing import Optional
from supabase import create_client, Client
from shop_backend.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def _create(key: str, env_name: str) -> Client:
    if not SUPABASE_URL or not key:
        raise RuntimeError(f"SUPABASE_URL/{env_name} manquants")
    return create_client(SUPABASE_URL, key)

def get_supabase() -> Client:
    global _supabase
    if _supabase is None:
        _supabase = _create(SUPABASE_ANON, "SUPABASE_ANON_KEY")
    return _supabase

def get_service_supabase() -> Client:
    global _service_supabase
    if _service_supabase is None:
        _service_supabase = _create(SUPABASE_SERVICE_KEY, "SUPABASE_SERVICE_KEY")
    return _service_supabase
