from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PromoteRequest(BaseModel):
    user_id: UUID


class RejectRequest(BaseModel):
    """Accepts userId (web client) or user_id."""

    user_id: UUID = Field(..., alias="userId")
    remarks: Optional[str] = Field(None, max_length=2000)

    class Config:
        populate_by_name = True


class ApprovalResult(BaseModel):
    ok: bool
    user_id: UUID
    status: str


class StatusTransitionResponse(BaseModel):
    id: UUID
    from_status: Optional[str] = None
    to_status: str
    action: str
    performed_by: Optional[UUID] = None
    remarks: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StatusHistoryResponse(BaseModel):
    user_id: UUID
    transitions: List[StatusTransitionResponse]
