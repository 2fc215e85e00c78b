import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class User(Base):
    __tablename__ = 'users'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, unique=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    password_hash = Column(Text, nullable=False)
    identification_strategy = Column(String, nullable=False, default='b2c')
    # Password recovery; token cleared once used
    reset_token = Column(String(64), nullable=True, unique=True)
    reset_token_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class Project(Base):
    __tablename__ = 'projects'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    sync_mode = Column(String, nullable=False, default='pool')
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_projects_user_id', 'user_id'),
    )


class ApiKey(Base):
    __tablename__ = 'api_keys'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # sha256 of the issued key; the raw key is only returned once
    api_key_hash = Column(String(64), nullable=False, unique=True)
    name = Column(String(100), nullable=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_api_keys_project_id', 'project_id'),
    )


class LinkedUser(Base):
    __tablename__ = 'linked_users'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Identifier of the end user inside the customer's own product
    linked_user_origin_id = Column(String, nullable=False)
    alias = Column(String, nullable=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        UniqueConstraint('project_id', 'linked_user_origin_id', name='uq_linked_users_project_origin'),
        Index('idx_linked_users_project_id', 'project_id'),
    )


class Connection(Base):
    __tablename__ = 'connections'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    status = Column(String(20), nullable=False, default='valid')  # valid|invalid
    provider_slug = Column(String, nullable=False)
    vertical = Column(String, nullable=False)
    token_type = Column(String(20), nullable=False, default='oauth')  # oauth|api_key|basic
    # Fernet ciphertexts, never the raw credentials
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    account_url = Column(String, nullable=True)
    expiration_timestamp = Column(DateTime(timezone=True), nullable=True)
    connection_token = Column(String(64), nullable=False)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    linked_user_id = Column(UUID(as_uuid=True), ForeignKey('linked_users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('linked_user_id', 'provider_slug', 'vertical', name='uq_connections_linked_user_provider'),
        Index('ix_connections_connection_token', 'connection_token', unique=True),
    )
