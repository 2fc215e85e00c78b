import uuid
from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base, now_utc


class AtsInterview(Base):
    __tablename__ = 'ats_interviews'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    status = Column(String(30), nullable=True)  # SCHEDULED|AWAITING_FEEDBACK|COMPLETED
    # Provider identifiers of objects this service does not unify
    application_id = Column(String, nullable=True)
    job_interview_stage_id = Column(String, nullable=True)
    organized_by = Column(String, nullable=True)
    interviewers = Column(JSONB, nullable=True)
    location = Column(Text, nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=True)
    end_at = Column(DateTime(timezone=True), nullable=True)
    remote_created_at = Column(DateTime(timezone=True), nullable=True)
    remote_updated_at = Column(DateTime(timezone=True), nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_ats_interviews_remote'),
        Index('ix_ats_interviews_connection_created', 'connection_id', 'created_at'),
    )


class AtsScorecard(Base):
    __tablename__ = 'ats_scorecards'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    overall_recommendation = Column(String(30), nullable=True)
    application_id = Column(String, nullable=True)
    interview_id = Column(UUID(as_uuid=True), nullable=True)
    remote_created_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_ats_scorecards_remote'),
        Index('ix_ats_scorecards_connection_created', 'connection_id', 'created_at'),
    )


class AtsCandidateAttachment(Base):
    __tablename__ = 'ats_candidate_attachments'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    file_url = Column(Text, nullable=True)
    file_name = Column(String, nullable=True)
    file_type = Column(String(50), nullable=True)
    candidate_id = Column(String, nullable=True)
    remote_created_at = Column(DateTime(timezone=True), nullable=True)
    remote_modified_at = Column(DateTime(timezone=True), nullable=True)
    remote_was_deleted = Column(Boolean, nullable=False, default=False)
    remote_id = Column(String, nullable=False)
    connection_id = Column(UUID(as_uuid=True), ForeignKey('connections.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('connection_id', 'remote_id', name='uq_ats_attachments_remote'),
        Index('ix_ats_attachments_connection_created', 'connection_id', 'created_at'),
    )
