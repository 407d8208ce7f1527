from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.report_model import ReportPriority
from app.models.target_enums import TargetCategory, TargetStatus
from app.schemas.common_schemas import CamelModel
from app.schemas.user_schemas import UserOut


class ReportCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: TargetCategory
    status: TargetStatus
    priority: ReportPriority
    location: Optional[str] = None


class ReportUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[TargetCategory] = None
    status: Optional[TargetStatus] = None
    priority: Optional[ReportPriority] = None
    location: Optional[str] = None


class ReportOut(CamelModel):
    id: int
    title: str
    description: str
    category: TargetCategory
    status: TargetStatus
    priority: ReportPriority
    location: Optional[str] = None
    author_id: str
    created_at: datetime
    updated_at: datetime


class ReportWithAuthorOut(ReportOut):
    author: Optional[UserOut] = None
