from __future__ import annotations

from pydantic import BaseModel


class AckResponse(BaseModel):
    status: bool = True
    detail: str
