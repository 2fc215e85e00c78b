"""
Unified ticketing endpoints: tickets and comments.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from unify.api.deps import ConnectionContext, get_connection_context
from unify.db import schemas
from unify.db.database import get_db
from unify.verticals.ticketing import comment_service, ticket_service

router = APIRouter(prefix="/ticketing", tags=["ticketing"])


@router.get("/tickets", response_model=schemas.Paginated[schemas.TicketOutput])
def list_tickets_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return ticket_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/tickets/{ticket_id}", response_model=schemas.TicketOutput)
def get_ticket_endpoint(
    ticket_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return ticket_service.get(
        db,
        ticket_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.post("/tickets", response_model=schemas.TicketOutput, status_code=status.HTTP_201_CREATED)
def create_ticket_endpoint(
    payload: schemas.TicketInput,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return ticket_service.add(
        db,
        data=payload.model_dump(),
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        remote_data=remote_data,
    )


@router.get("/comments", response_model=schemas.Paginated[schemas.CommentOutput])
def list_comments_endpoint(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = None,
    remote_data: bool = False,
    ticket_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    if ticket_id:
        return comment_service.list_for_ticket(
            db,
            ticket_id=ticket_id,
            connection_id=ctx.connection.id,
            provider=ctx.provider,
            linked_user_id=ctx.linked_user_id,
            limit=limit,
            remote_data=remote_data,
            cursor=cursor,
        )
    return comment_service.list(
        db,
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        limit=limit,
        remote_data=remote_data,
        cursor=cursor,
    )


@router.get("/comments/{comment_id}", response_model=schemas.CommentOutput)
def get_comment_endpoint(
    comment_id: uuid.UUID,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return comment_service.get(
        db,
        comment_id,
        linked_user_id=ctx.linked_user_id,
        provider=ctx.provider,
        remote_data=remote_data,
        connection_id=ctx.connection.id,
    )


@router.post("/comments", response_model=schemas.CommentOutput, status_code=status.HTTP_201_CREATED)
def create_comment_endpoint(
    payload: schemas.CommentInput,
    remote_data: bool = False,
    db: Session = Depends(get_db),
    ctx: ConnectionContext = Depends(get_connection_context),
):
    return comment_service.add(
        db,
        data=payload.model_dump(),
        connection_id=ctx.connection.id,
        provider=ctx.provider,
        linked_user_id=ctx.linked_user_id,
        remote_data=remote_data,
    )
