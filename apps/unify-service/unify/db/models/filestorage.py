import uuid
from sqlalchemy import Column, String, DateTime, Text, Boolean, BigInteger, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base, now_utc


class FsFolder(Base):
    __tablename__ = 'fs_folders'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    size = Column(BigInteger, nullable=True)
    folder_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    drive_id = Column(String, nullable=True)
    parent_folder_id = Column(UUID(as_uuid=True), nullable=True)
    shared_link = Column(Text, nullable=True)
    permission = Column(String, nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_fs_folders_remote'),
        Index('ix_fs_folders_connection_created', 'connection_id', 'created_at'),
    )


class FsGroup(Base):
    __tablename__ = 'fs_groups'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    users = Column(JSONB, nullable=True)
    remote_was_deleted = Column(Boolean, nullable=False, default=False)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_fs_groups_remote'),
        Index('ix_fs_groups_connection_created', 'connection_id', 'created_at'),
    )
