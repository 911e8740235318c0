from typing import Any, Optional

from fastapi import APIRouter, Depends

from dependencies import get_catalog
from errors import InvalidRequest
from spotify.client import SpotifyCatalog

router = APIRouter(tags=["search"])


@router.get("/api/search")
async def search(
    query: Optional[str] = None,
    catalog: SpotifyCatalog = Depends(get_catalog),
) -> list[dict[str, Any]]:
    """
    Searches the catalog for tracks matching `query`.
    Returns at most five track objects, possibly none.
    """
    if not query:
        raise InvalidRequest("Missing query")
    return await catalog.search(query)
