import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class Attribute(Base):
    """A customer-defined target field, optionally mapped to a provider field."""
    __tablename__ = 'attributes'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String, nullable=False)
    # '<vertical>.<object>', e.g. 'ats.interview'
    resource_owner_type = Column(String, nullable=False)
    data_type = Column(String, nullable=False, default='string')
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default='defined')  # defined|mapped
    # Provider-side field identifier, set when mapped
    remote_id = Column(String, nullable=True)
    source = Column(String, nullable=True)
    linked_user_id = Column(UUID(as_uuid=True), ForeignKey('linked_users.id', ondelete='CASCADE'), nullable=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_attributes_lookup', 'source', 'linked_user_id', 'resource_owner_type'),
        CheckConstraint("status in ('defined','mapped')", name='ck_attributes_status'),
    )


class Entity(Base):
    """Anchor row for custom field values of one unified object."""
    __tablename__ = 'entities'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    resource_owner_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class Value(Base):
    __tablename__ = 'values'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    data = Column(Text, nullable=False)
    attribute_id = Column(UUID(as_uuid=True), ForeignKey('attributes.id', ondelete='CASCADE'), nullable=False)
    entity_id = Column(UUID(as_uuid=True), ForeignKey('entities.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        UniqueConstraint('entity_id', 'attribute_id', name='uq_values_entity_attribute'),
    )
