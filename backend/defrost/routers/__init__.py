"""API routers."""

from defrost.routers.alerts import router as alerts_router
from defrost.routers.health import router as health_router
from defrost.routers.reports import router as reports_router

__all__ = ["alerts_router", "health_router", "reports_router"]
