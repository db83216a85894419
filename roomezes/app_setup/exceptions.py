"""
Gestionnaires d'exceptions enregistrés par la factory.
- HTTPException: {"detail": ...}
- CheckoutError: {"error": code, "detail": message utilisateur, ...contexte} avec le statut de la classe
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from roomezes.checkout.errors import CheckoutError, OrderPersistFailed, PaymentVerificationFailed

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_json(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(CheckoutError)
    async def checkout_error_json(request: Request, exc: CheckoutError):
        if isinstance(exc, OrderPersistFailed):
            logger.error("checkout error path=%s code=%s context=%s", request.url.path, exc.code, exc.context)
        elif isinstance(exc, PaymentVerificationFailed):
            logger.warning("checkout error path=%s code=%s reason=%s", request.url.path, exc.code, exc.reason)
        else:
            logger.info("checkout error path=%s code=%s reason=%s", request.url.path, exc.code, exc.reason)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(PermissionError)
    async def permission_error_json(request: Request, exc: PermissionError):
        return JSONResponse(status_code=401, content={"detail": str(exc) or "Not authenticated"})
