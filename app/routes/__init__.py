"""API routes package."""

from app.routes.contracts import router as contracts_router
from app.routes.dashboard import router as dashboard_router
from app.routes.health import router as health_router
from app.routes.notifications import router as notifications_router
from app.routes.sweeps import router as sweeps_router
from app.routes.tasks import router as tasks_router
from app.routes.users import router as users_router

__all__ = [
    "contracts_router",
    "dashboard_router",
    "health_router",
    "notifications_router",
    "sweeps_router",
    "tasks_router",
    "users_router",
]
