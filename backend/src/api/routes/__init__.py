"""API route modules."""
from api.routes.system import router as system_router
from api.routes.reference import router as reference_router
from api.routes.patients import router as patients_router
from api.routes.requests import router as requests_router
from api.routes.history import router as history_router
from api.routes.operators import router as operators_router

__all__ = [
    "system_router",
    "reference_router",
    "patients_router",
    "requests_router",
    "history_router",
    "operators_router",
]
