"""API Routes"""
from .leads import router as leads_router
from .interactions import router as interactions_router
from .imports import router as imports_router
from .pipeline import router as pipeline_router

__all__ = [
    "leads_router",
    "interactions_router",
    "imports_router",
    "pipeline_router"
]
