from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from hostdni.dependencies import get_catalogs
from hostdni.schemas.catalogs import ListEntryOut
from hostdni.schemas.envelope import ApiResponse
from hostdni.services.catalogs import Catalogs

router = APIRouter(prefix="/api", tags=["lists"])


@router.get("/allow-lists", response_model=ApiResponse[List[ListEntryOut]])
async def allow_lists(catalogs: Catalogs = Depends(get_catalogs)) -> ApiResponse[List[ListEntryOut]]:
    return ApiResponse[List[ListEntryOut]](
        success=True,
        data=[ListEntryOut.model_validate(item) for item in catalogs.allow_lists.list_items()],
    )


@router.get("/block-lists", response_model=ApiResponse[List[ListEntryOut]])
async def block_lists(catalogs: Catalogs = Depends(get_catalogs)) -> ApiResponse[List[ListEntryOut]]:
    return ApiResponse[List[ListEntryOut]](
        success=True,
        data=[ListEntryOut.model_validate(item) for item in catalogs.block_lists.list_items()],
    )
