"""Contact form API endpoints"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.contact_message import ContactMessage, ContactMessageStatus
from app.models.user import User, UserRole
from app.schemas.contact_message import (
    ContactMessageCreate,
    ContactMessageStatusUpdate,
    ContactMessageResponse,
    ContactMessageListResponse,
)
from app.api.auth import get_optional_user, require_role

router = APIRouter()
logger = structlog.get_logger()


async def _get_message(message_id: UUID, db: AsyncSession) -> ContactMessage:
    result = await db.execute(select(ContactMessage).where(ContactMessage.id == message_id))
    message = result.scalar_one_or_none()

    if not message:
        raise HTTPException(status_code=404, detail="Message not found")

    return message


@router.post("", response_model=ContactMessageResponse, status_code=201)
async def create_message(
    message_data: ContactMessageCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Send a message through the contact form (public)"""
    message = ContactMessage(
        user_id=current_user.id if current_user else None,
        name=message_data.name,
        email=message_data.email.lower(),
        phone=(message_data.phone or "").strip() or None,
        message=message_data.message,
        status=ContactMessageStatus.NEW.value,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)

    logger.info("Contact message received", message_id=str(message.id), has_user=current_user is not None)
    return message


@router.get("", response_model=ContactMessageListResponse)
async def list_messages(
    status: Optional[ContactMessageStatus] = None,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List contact messages, newest first (admin only)"""
    query = select(ContactMessage)
    count_query = select(func.count(ContactMessage.id))

    if status:
        query = query.where(ContactMessage.status == status.value)
        count_query = count_query.where(ContactMessage.status == status.value)

    total_result = await db.execute(count_query)
    total = total_result.scalar()

    result = await db.execute(query.order_by(ContactMessage.created_at.desc()))
    return ContactMessageListResponse(items=result.scalars().all(), total=total)


@router.put("/{message_id}/status", response_model=ContactMessageResponse)
async def update_message_status(
    message_id: UUID,
    update: ContactMessageStatusUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Triage a message (admin only)"""
    message = await _get_message(message_id, db)

    message.status = update.status.value
    await db.commit()
    await db.refresh(message)

    return message


@router.delete("/{message_id}", status_code=204)
async def delete_message(
    message_id: UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a message (admin only)"""
    message = await _get_message(message_id, db)

    await db.delete(message)
    await db.commit()
