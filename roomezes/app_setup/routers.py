"""
Registre central des routers (API v1 + health).
"""
from fastapi import FastAPI
from roomezes.payments import views as payments_views
from roomezes.checkout import views as checkout_views
from roomezes.notifications import views as notifications_views
from roomezes.canteens import views as canteens_views
from roomezes.printing import views as printing_views
from roomezes.community import views as community_views
from roomezes.rooms import views as rooms_views
from roomezes.roommates import views as roommates_views
from roomezes.services import views as services_views
from roomezes.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(payments_views.router)
    app.include_router(checkout_views.router)
    app.include_router(notifications_views.router)
    app.include_router(canteens_views.router)
    app.include_router(printing_views.router)
    app.include_router(community_views.router)
    app.include_router(rooms_views.router)
    app.include_router(roommates_views.router)
    app.include_router(services_views.router)
    # Health & monitoring
    app.include_router(health_router)
