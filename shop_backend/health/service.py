"""
Diagnostic Supabase pour /health/supabase.
Ne lève jamais: chaque étape (DNS, client, tables) rapporte son propre état.
"""
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse
import socket
from shop_backend.config import SUPABASE_URL, SUPABASE_SERVICE_KEY
import shop_backend.infra.supabase_client as supabase_client

# Tables lues par le checkout (panier + produits) et écrites à la confirmation (orders)
CHECKED_TABLES = ("cart", "orders", "products")

def _resolve(hostname: Optional[str]) -> Tuple[Optional[bool], Optional[str]]:
    if not hostname:
        return None, None
    try:
        socket.getaddrinfo(hostname, 443)
        return True, None
    except OSError as e:
        return False, str(e)

def _probe_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("*").limit(1).execute()
    except Exception as e:
        return {"ok": False, "error": str(e)}
    return {"ok": True, "rows": len(res.data or [])}

def health_supabase_info() -> Dict[str, Any]:
    hostname = urlparse(SUPABASE_URL).hostname if SUPABASE_URL else None
    dns_ok, dns_error = _resolve(hostname)
    info: Dict[str, Any] = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "client": "service" if SUPABASE_SERVICE_KEY else "anon",
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        # anon: les politiques RLS peuvent masquer cart/orders
        if SUPABASE_SERVICE_KEY:
            client = supabase_client.get_service_supabase()
        else:
            client = supabase_client.get_supabase()
    except Exception as e:
        info["error"] = str(e)
        return info
    info["tables"] = {name: _probe_table(client, name) for name in CHECKED_TABLES}
    info["connect_ok"] = True
    return info
