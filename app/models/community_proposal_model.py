from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SqlEnum
from sqlalchemy.orm import relationship

from app.database import Base, utcnow
from app.models.target_enums import TargetCategory, TargetStatus


class CommunityProposal(Base):
    __tablename__ = "community_proposals"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(45), nullable=False)
    description = Column(String(45), nullable=False)
    neighborhood = Column(String(100), nullable=False)
    category = Column(SqlEnum(TargetCategory, name="proposal_category"), nullable=False)
    status = Column(SqlEnum(TargetStatus, name="proposal_status"), nullable=False, default=TargetStatus.DRAFT)

    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    author = relationship("User", lazy="raise")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
