"""
Unified file storage endpoints: folders and groups.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from unify.api.deps import ConnectionContext, get_connection_context
from unify.db import schemas
from unify.db.database import get_db
from unify.verticals.filestorage import folder_service, group_service

router = APIRouter(prefix="/filestorage", tags=["filestorage"])


@router.get("/folders", response_model=schemas.Paginated[schemas.FolderOutput])
def list_folders_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return folder_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/folders/{folder_id}", response_model=schemas.FolderOutput)
def get_folder_endpoint(
    folder_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return folder_service.get(
        db,
        folder_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.post("/folders", response_model=schemas.FolderOutput, status_code=status.HTTP_201_CREATED)
def create_folder_endpoint(
    payload: schemas.FolderInput,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return folder_service.add(
        db,
        data=payload.model_dump(),
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        remote_data=remote_data,
    )


@router.get("/groups", response_model=schemas.Paginated[schemas.GroupOutput])
def list_groups_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return group_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/groups/{group_id}", response_model=schemas.GroupOutput)
def get_group_endpoint(
    group_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return group_service.get(
        db,
        group_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )
