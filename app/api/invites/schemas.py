from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GenerateInvitesRequest(BaseModel):
    imported_ids: List[UUID] = Field(..., min_length=1)


class GeneratedInvite(BaseModel):
    imported_id: UUID
    email: str
    full_name: str
    code: str
    link: str


class SkippedInvite(BaseModel):
    imported_id: UUID
    reason: str


class GenerateInvitesResponse(BaseModel):
    invites: List[GeneratedInvite]
    skipped: List[SkippedInvite]


class ClaimInviteRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class ClaimInviteResponse(BaseModel):
    ok: bool
    imported_alumni_id: UUID
    full_name: Optional[str] = None
    next_route: str
