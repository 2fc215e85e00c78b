"""Unified ATS services and their sync services."""
from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from unify.db import models, schemas
from unify.services.base import UnifiedObjectService
from unify.services.sync import BaseSyncService


class InterviewService(UnifiedObjectService):
    vertical = "ats"
    object_name = "interview"
    model = models.AtsInterview
    output_schema = schemas.InterviewOutput
    url = "/ats/interviews"


class ScoreCardService(UnifiedObjectService):
    vertical = "ats"
    object_name = "scorecard"
    model = models.AtsScorecard
    output_schema = schemas.ScoreCardOutput
    url = "/ats/scorecards"

    def list_for_interview(
        self,
        db: Session,
        *,
        interview_id: uuid.UUID,
        connection_id: uuid.UUID,
        provider: str,
        linked_user_id: uuid.UUID,
        limit: int,
        remote_data: bool = False,
        cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self.list(
            db,
            connection_id=connection_id,
            provider=provider,
            linked_user_id=linked_user_id,
            limit=limit,
            remote_data=remote_data,
            cursor=cursor,
            extra_filters=[models.AtsScorecard.interview_id == interview_id],
        )


class AttachmentService(UnifiedObjectService):
    vertical = "ats"
    object_name = "attachment"
    model = models.AtsCandidateAttachment
    output_schema = schemas.AttachmentOutput
    url = "/ats/attachments"


class InterviewSyncService(BaseSyncService):
    vertical = "ats"
    object_name = "interview"
    model = models.AtsInterview
    output_schema = schemas.InterviewOutput


class ScoreCardSyncService(BaseSyncService):
    vertical = "ats"
    object_name = "scorecard"
    model = models.AtsScorecard
    output_schema = schemas.ScoreCardOutput


class AttachmentSyncService(BaseSyncService):
    vertical = "ats"
    object_name = "attachment"
    model = models.AtsCandidateAttachment
    output_schema = schemas.AttachmentOutput

    def prepare(self, db: Session, unified: Dict[str, Any], connection_id: uuid.UUID) -> Dict[str, Any]:
        if unified.get("remote_was_deleted") is None:
            unified["remote_was_deleted"] = False
        return unified
