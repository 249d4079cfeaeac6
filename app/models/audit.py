"""Audit log model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class AuditLog(Base):
    """Audit trail for reservation changes"""
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Actor information
    actor_id = Column(UUID(as_uuid=True))  # User ID or null for system
    actor_type = Column(String(50))  # customer, admin, system

    # Action details
    action = Column(String(100), nullable=False)  # create_reservation, change_status, etc.
    resource_type = Column(String(50))  # reservation
    resource_id = Column(UUID(as_uuid=True), index=True)

    # Change data, e.g. {"from": "pending", "to": "confirmed"}
    data_json = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)
