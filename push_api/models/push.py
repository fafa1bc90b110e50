# push_api/models/push.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------- Requests ----------
class DispatchRequest(BaseModel):
    """Body de /api/push (FCM v1). Se exige tokens[] o userIds[] no vacío."""

    model_config = ConfigDict(populate_by_name=True)

    tokens: Optional[list[str]] = None
    user_ids: Optional[list[str]] = Field(default=None, alias="userIds")
    title: Optional[str] = None
    body: Optional[str] = None
    data: Optional[dict[str, Any]] = None

    def has_targets(self) -> bool:
        return bool(self.tokens) or bool(self.user_ids)


class LegacyDispatchRequest(BaseModel):
    """Body de /api/push/legacy: uid y title obligatorios."""

    uid: str
    title: str
    body: str = ""

    @field_validator("uid", "title")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("no puede ir vacío")
        return v

    @field_validator("body", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# ---------- Resultado ----------
class DispatchResult(BaseModel):
    delivered: int = 0
    total: int = 0
