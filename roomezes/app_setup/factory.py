"""
Factory d'application utilisée par les entrypoints (roomezes.asgi, python -m roomezes).
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware, register_force_https_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers
from roomezes.utils.csrf import register_csrf_middleware

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      1) middlewares de base (session, CORS, TrustedHost, proxy)
      2) CSRF double-submit cookie puis en-têtes de sécurité
      3) gestionnaires d'exceptions et routers
      4) redirection HTTPS, ajoutée en dernier pour s'exécuter en premier
    """
    app = FastAPI(title="Roomezes API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_csrf_middleware(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    register_force_https_middleware(app)
    return app
