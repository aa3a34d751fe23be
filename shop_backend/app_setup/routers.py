"""
Registre central des routers (paiements, health).
"""
from fastapi import FastAPI
from shop_backend.payments import views as payments_views
from shop_backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(health_router)
