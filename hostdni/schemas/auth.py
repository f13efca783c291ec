from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TokenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    expires_in: int
