"""
Will Engine - Catalogs API Router
"""
from fastapi import APIRouter, Depends

from ..catalogs import get_library
from ..models import ClauseLibrary

router = APIRouter(prefix="/catalogs", tags=["catalogs"])


@router.get("")
async def list_catalogs(library: ClauseLibrary = Depends(get_library)):
    """Clause ids per article and category."""
    return {"articles": library.summary()}
