from datetime import datetime
from typing import List, Optional

from ninja import Schema
from pydantic import EmailStr, Field, field_validator

from leads.models import LeadSource, LeadStatus


class LeadCreateSchema(Schema):
    """Fields accepted when creating a lead"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field("", max_length=32)
    company: str = Field("", max_length=255)
    city: str = Field("", max_length=100)
    state: str = Field("", max_length=100)
    source: LeadSource = LeadSource.WEBSITE
    status: LeadStatus = LeadStatus.NEW
    score: int = Field(0, ge=0, le=100)
    lead_value: float = Field(0, ge=0)
    last_activity_at: Optional[datetime] = None
    is_qualified: bool = False

    class Config:
        extra = "forbid"
        str_strip_whitespace = True

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class LeadUpdateSchema(Schema):
    """Partial update. Omitted fields are left untouched."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)
    company: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    source: Optional[LeadSource] = None
    status: Optional[LeadStatus] = None
    score: Optional[int] = Field(None, ge=0, le=100)
    lead_value: Optional[float] = Field(None, ge=0)
    last_activity_at: Optional[datetime] = None
    is_qualified: Optional[bool] = None

    class Config:
        extra = "forbid"
        str_strip_whitespace = True

    @field_validator(
        "first_name", "last_name", "email", "source", "status",
        "score", "lead_value", "is_qualified",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("phone", "company", "city", "state")
    @classmethod
    def null_to_blank(cls, value: Optional[str]) -> str:
        return value or ""


class LeadResponseSchema(Schema):
    """Schema for lead response"""
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str
    company: str
    city: str
    state: str
    source: str
    status: str
    score: int
    lead_value: float
    last_activity_at: Optional[datetime] = None
    is_qualified: bool
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadEnvelopeSchema(Schema):
    message: Optional[str] = None
    lead: LeadResponseSchema


class LeadListResponseSchema(Schema):
    """Schema for a page of leads"""
    data: List[LeadResponseSchema]
    page: int
    limit: int
    total: int
    totalPages: int
