import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SqlEnum
from sqlalchemy.orm import relationship

from app.database import Base, utcnow
from app.models.target_enums import TargetCategory, TargetStatus


class ReportPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SqlEnum(TargetCategory, name="report_category"), nullable=False)
    status = Column(SqlEnum(TargetStatus, name="report_status"), nullable=False)
    priority = Column(SqlEnum(ReportPriority, name="report_priority"), nullable=False)
    location = Column(Text, nullable=True)

    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    author = relationship("User", lazy="raise")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
