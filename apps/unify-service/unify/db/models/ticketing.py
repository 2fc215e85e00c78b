import uuid
from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base, now_utc


class TcgTicket(Base):
    __tablename__ = 'tcg_tickets'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=True)
    status = Column(String(20), nullable=True)  # OPEN|CLOSED
    description = Column(Text, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    type = Column(String(30), nullable=True)
    parent_ticket = Column(UUID(as_uuid=True), nullable=True)
    collections = Column(JSONB, nullable=True)
    tags = Column(JSONB, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    priority = Column(String(20), nullable=True)  # HIGH|MEDIUM|LOW|URGENT
    assigned_to = Column(JSONB, nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_tickets_remote'),
        Index('ix_tcg_tickets_connection_created', 'connection_id', 'created_at'),
    )


class TcgComment(Base):
    __tablename__ = 'tcg_comments'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    body = Column(Text, nullable=True)
    html_body = Column(Text, nullable=True)
    is_private = Column(Boolean, nullable=True)
    creator_type = Column(String(20), nullable=True)  # user|contact
    ticket_id = Column(UUID(as_uuid=True), ForeignKey('tcg_tickets.id', ondelete='SET NULL'), nullable=True)
    user_id = Column(UUID(as_uuid=True), nullable=True)
    contact_id = Column(UUID(as_uuid=True), nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_comments_remote'),
        Index('ix_tcg_comments_connection_created', 'connection_id', 'created_at'),
        Index('ix_tcg_comments_ticket_id', 'ticket_id'),
    )


class TcgUser(Base):
    __tablename__ = 'tcg_users'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    email_address = Column(String, nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_users_remote'),
    )


class TcgCollection(Base):
    __tablename__ = 'tcg_collections'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    collection_type = Column(String(20), nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_collections_remote'),
    )


class TcgTag(Base):
    __tablename__ = 'tcg_tags'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    ticket_id = Column(UUID(as_uuid=True), ForeignKey('tcg_tickets.id', ondelete='CASCADE'), nullable=True)
    # Tags carry no provider id of their own; the name doubles as remote id
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_tags_remote'),
    )
