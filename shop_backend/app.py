# module shop_backend.app
"""
Instance FastAPI unique du service de paiement.
La configuration (lifespan, middlewares, handlers, routers) vit dans shop_backend.app_setup.
"""
from shop_backend.app_setup.factory import create_app

app = create_app()
