"""API routers for the verifierd daemon."""

from .metrics import router as metrics_router
from .status import router as status_router
from .verifier import router as verifier_router

__all__ = [
    "metrics_router",
    "status_router",
    "verifier_router",
]
