"""
Unified marketing automation endpoints. No provider supports actions yet, so
creation answers 422.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from unify.api.deps import ConnectionContext, get_connection_context
from unify.db import schemas
from unify.db.database import get_db
from unify.verticals.marketingautomation import action_service

router = APIRouter(prefix="/marketingautomation", tags=["marketingautomation"])


@router.get("/actions", response_model=schemas.Paginated[schemas.ActionOutput])
def list_actions_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return action_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/actions/{action_id}", response_model=schemas.ActionOutput)
def get_action_endpoint(
    action_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return action_service.get(
        db,
        action_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.post("/actions", response_model=schemas.ActionOutput, status_code=status.HTTP_201_CREATED)
def create_action_endpoint(
    payload: schemas.ActionInput,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return action_service.add(
        db,
        data=payload.model_dump(),
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        remote_data=remote_data,
    )
