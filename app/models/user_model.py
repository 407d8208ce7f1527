import enum
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Enum as SqlEnum, true

from app.database import Base, utcnow


class UserRole(str, enum.Enum):
    CITIZEN = "citizen"
    COUNCILOR = "councilor"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    cpf = Column(String(11), unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash, never serialized
    role = Column(SqlEnum(UserRole, name="user_role"), nullable=False, default=UserRole.CITIZEN)
    is_active = Column(Boolean, default=True, nullable=False, server_default=true())

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
