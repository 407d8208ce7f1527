import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint, Index, Enum as SqlEnum
from sqlalchemy.orm import relationship

from app.database import Base, utcnow


class VoteDirection(str, enum.Enum):
    UP = "up"
    DOWN = "down"


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        # One vote per user per project; the store is the source of truth
        UniqueConstraint("user_id", "project_id", name="uq_votes_user_project"),
        Index("ix_votes_project_created", "project_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    direction = Column(SqlEnum(VoteDirection, name="vote_direction"), nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", lazy="raise")
    project = relationship("Project", lazy="raise")
