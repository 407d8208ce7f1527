from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.vote_model import VoteDirection
from app.schemas.common_schemas import CamelModel
from app.schemas.project_schemas import ProjectOut
from app.schemas.user_schemas import UserOut


class VoteIn(CamelModel):
    type: VoteDirection
    comment: Optional[str] = Field(default=None, max_length=2000)


class VoteOut(CamelModel):
    id: str
    user_id: str
    project_id: str
    # stored as ``direction``, exposed as ``type`` like the request body
    type: VoteDirection = Field(validation_alias="direction")
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VoteWithUserOut(VoteOut):
    user: Optional[UserOut] = None


class VoteWithProjectOut(VoteOut):
    project: Optional[ProjectOut] = None
