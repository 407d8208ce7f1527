from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.target_enums import TargetCategory, TargetStatus
from app.schemas.common_schemas import CamelModel
from app.schemas.user_schemas import UserOut


class CommunityProposalCreate(CamelModel):
    title: str = Field(min_length=1, max_length=45)
    description: str = Field(min_length=1, max_length=45)
    category: TargetCategory
    neighborhood: str = Field(min_length=1, max_length=100)


class CommunityProposalUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=45)
    description: Optional[str] = Field(default=None, min_length=1, max_length=45)
    category: Optional[TargetCategory] = None
    status: Optional[TargetStatus] = None
    neighborhood: Optional[str] = Field(default=None, min_length=1, max_length=100)


class CommunityProposalOut(CamelModel):
    id: int
    title: str
    description: str
    neighborhood: str
    category: TargetCategory
    status: TargetStatus
    author_id: str
    created_at: datetime
    updated_at: datetime


class CommunityProposalWithAuthorOut(CommunityProposalOut):
    author: Optional[UserOut] = None


class CategoryStatOut(BaseModel):
    category: TargetCategory
    count: int


class MonthlyStatOut(BaseModel):
    month: str
    propostas: int
    aprovadas: int
