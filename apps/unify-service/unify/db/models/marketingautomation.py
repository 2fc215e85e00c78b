import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class MaAction(Base):
    __tablename__ = 'ma_actions'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    type = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(30), nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_ma_actions_remote'),
        Index('ix_ma_actions_connection_created', 'connection_id', 'created_at'),
    )
