"""
Unified ATS endpoints: interviews, scorecards and candidate attachments.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from unify.api.deps import ConnectionContext, get_connection_context
from unify.db import schemas
from unify.db.database import get_db
from unify.verticals.ats import attachment_service, interview_service, scorecard_service

router = APIRouter(prefix="/ats", tags=["ats"])


@router.get("/interviews", response_model=schemas.Paginated[schemas.InterviewOutput])
def list_interviews_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return interview_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/interviews/{interview_id}", response_model=schemas.InterviewOutput)
def get_interview_endpoint(
    interview_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return interview_service.get(
        db,
        interview_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.post("/interviews", response_model=schemas.InterviewOutput, status_code=status.HTTP_201_CREATED)
def create_interview_endpoint(
    payload: schemas.InterviewInput,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return interview_service.add(
        db,
        data=payload.model_dump(),
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        remote_data=remote_data,
    )


@router.get("/scorecards", response_model=schemas.Paginated[schemas.ScoreCardOutput])
def list_scorecards_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    interview_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    if interview_id:
        return scorecard_service.list_for_interview(
            db,
            interview_id=interview_id,
            connection_id=ctx.connection.id,
            provider=ctx.provider,
            linked_user_id=ctx.linked_user_id,
            limit=limit,
            remote_data=remote_data,
            cursor=cursor,
        )
    return scorecard_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/scorecards/{scorecard_id}", response_model=schemas.ScoreCardOutput)
def get_scorecard_endpoint(
    scorecard_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return scorecard_service.get(
        db,
        scorecard_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.get("/attachments", response_model=schemas.Paginated[schemas.AttachmentOutput])
def list_attachments_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return attachment_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/attachments/{attachment_id}", response_model=schemas.AttachmentOutput)
def get_attachment_endpoint(
    attachment_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return attachment_service.get(
        db,
        attachment_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.post("/attachments", response_model=schemas.AttachmentOutput, status_code=status.HTTP_201_CREATED)
def create_attachment_endpoint(
    payload: schemas.AttachmentInput,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return attachment_service.add(
        db,
        data=payload.model_dump(),
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        remote_data=remote_data,
    )
