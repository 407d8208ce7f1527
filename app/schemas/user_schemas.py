
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.user_model import UserRole
from app.schemas.common_schemas import CamelModel

CPF_LENGTH = 11


def strip_cpf(value: str) -> str:
    """Drop the usual ``123.456.789-09`` punctuation and surrounding spaces."""
    return re.sub(r"[.\-\s]", "", value or "")


def normalize_cpf(value: str) -> str:
    digits = strip_cpf(value)
    if not digits.isdigit() or len(digits) != CPF_LENGTH:
        raise ValueError(f"CPF must contain exactly {CPF_LENGTH} digits")
    return digits


class UserCreate(CamelModel):
    email: EmailStr
    name: str = Field(min_length=2, max_length=255)
    cpf: str
    password: str = Field(min_length=6, max_length=72)

    @field_validator("cpf")
    @classmethod
    def validate_cpf(cls, v):
        return normalize_cpf(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if len(v.strip()) < 2:
            raise ValueError("Name must have at least 2 characters")
        return v


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    cpf: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("cpf")
    @classmethod
    def validate_cpf(cls, v):
        return normalize_cpf(v) if v is not None else v


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    cpf: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserLogin(BaseModel):
    cpf: str
    password: str

    @field_validator("cpf")
    @classmethod
    def clean_cpf(cls, v):
        # Format is not validated here; a bad cpf is just a failed login
        return strip_cpf(v)


class TokenOut(BaseModel):
    access_token: str
    role: UserRole
