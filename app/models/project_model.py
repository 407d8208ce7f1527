import uuid

from sqlalchemy import (Column, Integer, String, Text, DateTime, ForeignKey,
                        CheckConstraint, Enum as SqlEnum)
from sqlalchemy.orm import relationship

from app.database import Base, utcnow
from app.models.target_enums import TargetCategory, TargetStatus


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("votes_for >= 0", name="ck_projects_votes_for_non_negative"),
        CheckConstraint("votes_against >= 0", name="ck_projects_votes_against_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SqlEnum(TargetCategory, name="project_category"), nullable=False)
    status = Column(SqlEnum(TargetStatus, name="project_status"), nullable=False, default=TargetStatus.DRAFT)
    neighborhood = Column(String(50), nullable=False)

    # Denormalized; only the vote ledger writes these
    votes_for = Column(Integer, nullable=False, default=0, server_default="0")
    votes_against = Column(Integer, nullable=False, default=0, server_default="0")

    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    author = relationship("User", lazy="raise")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
