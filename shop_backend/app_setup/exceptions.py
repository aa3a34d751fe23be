"""
Gestionnaires d'exceptions.
- CheckoutError -> JSON {"error", "code", ...détail} avec le statut de la catégorie
  (400 entrée/état Stripe, 404 session introuvable, 500 opaque pour les erreurs internes).
- HTTPException -> JSON FastAPI standard {"detail"}.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from shop_backend.payments.errors import CheckoutError, InternalError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        if isinstance(exc, InternalError):
            logger.error("%s %s internal error: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
