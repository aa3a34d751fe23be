"""
Limitation de débit optionnelle (création de session Checkout).
- Clé: IP client (request.client, réécrit par ProxyHeadersMiddleware derrière un proxy) + chemin; pas d'authentification.
- LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev/tests, process unique).
- Sinon fastapi-limiter sur Redis, initialisé par le lifespan.
"""
from typing import Any, Dict, List
from urllib.parse import urlparse
from fastapi import Request, Response, HTTPException
import logging
import os
import time

logger = logging.getLogger(__name__)

TOO_MANY = "Too Many Requests"


def _client_key(req: Request) -> str:
    # request.client est déjà réécrit par ProxyHeadersMiddleware; X-Forwarded-For brut est contrôlé par le client
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{req.url.path}"

def _local_window(request: Request, times: int, seconds: int) -> None:
    """Fenêtre glissante stockée sur app.state; 429 au-delà de `times` appels en `seconds`."""
    now = time.time()
    key = _client_key(request)
    store: Dict[str, List[float]] = getattr(request.app.state, "_rl_store", {})
    recent = [t for t in store.get(key, []) if now - t < seconds]
    if len(recent) >= times:
        logger.info("rate_limit.local blocked key=%s", key)
        raise HTTPException(status_code=429, detail=TOO_MANY)
    store[key] = recent + [now]
    request.app.state._rl_store = store

async def _redis_window(request: Request, response: Response, times: int, seconds: int) -> None:
    from fastapi_limiter.depends import RateLimiter

    async def _identifier(req: Request) -> str:
        return _client_key(req)

    limiter = RateLimiter(times=times, seconds=seconds, identifier=_identifier)
    try:
        await limiter(request, response)
    except HTTPException:
        raise
    except Exception as e:
        # Redis absent ou limiteur non initialisé: la vente passe avant la limite
        logger.debug("rate_limit.redis unavailable: %s", e)

def optional_rate_limit(times: int, seconds: int):
    """Dépendance FastAPI: `dependencies=[Depends(optional_rate_limit(10, 60))]`."""
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            _local_window(request, times, seconds)
            return
        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return
        await _redis_window(request, response, times, seconds)
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    """État du limiteur pour /health/rate-limit (jamais d'exception)."""
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    try:
        from fastapi_limiter import FastAPILimiter
        ready = getattr(FastAPILimiter, "redis", None) is not None
    except Exception:
        ready = False

    info: Dict[str, Any] = {
        "enabled": None if enabled is None else bool(enabled),
        "ready": ready,
        "backend": "redis" if ready else None,
    }
    redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
    if ready and redis_url:
        p = urlparse(redis_url)
        info["redis"] = {"scheme": p.scheme, "host": p.hostname, "port": p.port}
    return info
