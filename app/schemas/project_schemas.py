from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.target_enums import TargetCategory, TargetStatus
from app.schemas.common_schemas import CamelModel
from app.schemas.user_schemas import UserOut


class ProjectCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: TargetCategory
    neighborhood: str = Field(min_length=1, max_length=50)


class ProjectUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[TargetCategory] = None
    status: Optional[TargetStatus] = None
    neighborhood: Optional[str] = Field(default=None, min_length=1, max_length=50)


class ProjectOut(CamelModel):
    id: str
    title: str
    description: str
    category: TargetCategory
    status: TargetStatus
    neighborhood: str
    votes_for: int
    votes_against: int
    author_id: str
    created_at: datetime
    updated_at: datetime


class ProjectWithAuthorOut(ProjectOut):
    author: Optional[UserOut] = None
