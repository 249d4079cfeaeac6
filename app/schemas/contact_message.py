"""Contact message schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from app.models.contact_message import ContactMessageStatus


class ContactMessageCreate(BaseModel):
    """Public contact form submission"""
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    message: str = Field(..., min_length=1)


class ContactMessageStatusUpdate(BaseModel):
    status: ContactMessageStatus


class ContactMessageResponse(BaseModel):
    """Contact message response"""
    id: UUID
    user_id: Optional[UUID]
    name: str
    email: str
    phone: Optional[str]
    message: str
    status: ContactMessageStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ContactMessageListResponse(BaseModel):
    items: List[ContactMessageResponse]
    total: int
