"""Will Engine - API Routers"""
from .catalogs import router as catalogs_router
from .family import router as family_router
from .selections import router as selections_router
from .documents import router as documents_router

__all__ = [
    "catalogs_router",
    "family_router",
    "selections_router",
    "documents_router",
]
