import uuid
from sqlalchemy import Column, String, DateTime, Text, Integer, Boolean, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base, now_utc


class RemoteData(Base):
    """Raw provider payload kept alongside each unified object."""
    __tablename__ = 'remote_data'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    resource_owner_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    format = Column(String(10), nullable=False, default='json')
    data = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)


class Event(Base):
    __tablename__ = 'events'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    status = Column(String(20), nullable=False)  # success|fail
    type = Column(String, nullable=False)
    method = Column(String(10), nullable=False)
    url = Column(String, nullable=False)
    provider = Column(String, nullable=True)
    direction = Column(String(1), nullable=False, default='0')  # 0 inbound, 1 outbound
    timestamp = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    linked_user_id = Column(UUID(as_uuid=True), ForeignKey('linked_users.id', ondelete='SET NULL'), nullable=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=True)

    __table_args__ = (
        Index('ix_events_project_id_timestamp', 'project_id', 'timestamp'),
        Index('ix_events_type', 'type'),
    )


class WebhookEndpoint(Base):
    __tablename__ = 'webhook_endpoints'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    url = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    secret = Column(String(128), nullable=False)
    # Event types this endpoint subscribes to
    scope = Column(JSONB, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    last_update = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_webhook_endpoints_project_id', 'project_id'),
    )


class WebhookDelivery(Base):
    __tablename__ = 'webhook_deliveries'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    endpoint_id = Column(UUID(as_uuid=True), ForeignKey('webhook_endpoints.id', ondelete='CASCADE'), nullable=False)
    event_id = Column(UUID(as_uuid=True), ForeignKey('events.id', ondelete='SET NULL'), nullable=True)
    event_type = Column(String, nullable=False)
    payload = Column(JSONB, nullable=False)
    status = Column(String(20), nullable=False, default='pending')  # pending|success|failure
    attempt_count = Column(Integer, nullable=False, default=0)
    http_status = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)
    next_retry_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_webhook_deliveries_status_next_retry', 'status', 'next_retry_at'),
    )
