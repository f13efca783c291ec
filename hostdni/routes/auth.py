from __future__ import annotations

from fastapi import APIRouter, Depends

from hostdni.dependencies import get_token_manager
from hostdni.logger import get_logger
from hostdni.schemas.auth import TokenOut
from hostdni.schemas.envelope import ApiResponse
from hostdni.security import TokenManager

router = APIRouter(prefix="/api/auth", tags=["auth"])
_logger = get_logger("api.auth")


@router.get("/token", response_model=ApiResponse[TokenOut])
async def get_token(tokens: TokenManager = Depends(get_token_manager)) -> ApiResponse[TokenOut]:
    snapshot = tokens.current()
    _logger.debug("token.issue", "Returned current API token", expires_in=snapshot.expires_in)
    return ApiResponse[TokenOut](success=True, data=TokenOut.model_validate(snapshot))
