"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: uvicorn, gunicorn + UvicornWorker) importe `shop_backend.asgi:app`.
- Toute la configuration FastAPI est centralisée dans shop_backend.app_setup, ce fichier ne fait qu'exposer l'instance.
"""

from shop_backend.app import app

__all__ = ["app"]
