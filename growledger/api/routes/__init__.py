"""API route modules."""

from growledger.api.routes.audit import router as audit_router
from growledger.api.routes.clean_queue import router as clean_queue_router
from growledger.api.routes.health import router as health_router
from growledger.api.routes.recipes import router as recipes_router
from growledger.api.routes.runs import router as runs_router
from growledger.api.routes.supplies import router as supplies_router

__all__ = [
    "health_router",
    "supplies_router",
    "audit_router",
    "recipes_router",
    "runs_router",
    "clean_queue_router",
]
