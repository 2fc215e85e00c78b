import uuid
from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel

from .common import UnifiedInput, UnifiedOutput

InterviewStatus = Literal["SCHEDULED", "AWAITING_FEEDBACK", "COMPLETED"]
Recommendation = Literal["DEFINITELY_NO", "NO", "YES", "STRONG_YES", "NO_DECISION"]


class InterviewFields(BaseModel):
    status: Optional[InterviewStatus] = None
    application_id: Optional[str] = None
    job_interview_stage_id: Optional[str] = None
    organized_by: Optional[str] = None
    interviewers: Optional[List[str]] = None
    location: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    remote_created_at: Optional[datetime] = None
    remote_updated_at: Optional[datetime] = None


class InterviewInput(InterviewFields, UnifiedInput):
    pass


class InterviewOutput(InterviewFields, UnifiedOutput):
    pass


class ScoreCardFields(BaseModel):
    overall_recommendation: Optional[Recommendation] = None
    application_id: Optional[str] = None
    interview_id: Optional[uuid.UUID] = None
    remote_created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None


class ScoreCardInput(ScoreCardFields, UnifiedInput):
    pass


class ScoreCardOutput(ScoreCardFields, UnifiedOutput):
    pass


class AttachmentFields(BaseModel):
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    candidate_id: Optional[str] = None
    remote_created_at: Optional[datetime] = None
    remote_modified_at: Optional[datetime] = None
    remote_was_deleted: Optional[bool] = None


class AttachmentInput(AttachmentFields, UnifiedInput):
    pass


class AttachmentOutput(AttachmentFields, UnifiedOutput):
    pass
