"""
Repositories for webhook endpoints and their delivery log.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.db.models.base import now_utc


def create_endpoint(
    db: Session,
    *,
    project_id: uuid.UUID,
    url: str,
    secret: str,
    scope: List[str],
    description: Optional[str] = None,
) -> models.WebhookEndpoint:
    endpoint = models.WebhookEndpoint(
        project_id=project_id,
        url=url,
        secret=secret,
        scope=list(scope),
        description=description,
        active=True,
    )
    db.add(endpoint)
    db.commit()
    db.refresh(endpoint)
    return endpoint


def get_endpoint(db: Session, endpoint_id: uuid.UUID) -> Optional[models.WebhookEndpoint]:
    return db.query(models.WebhookEndpoint).filter(models.WebhookEndpoint.id == endpoint_id).first()


def list_endpoints(db: Session, project_id: uuid.UUID) -> List[models.WebhookEndpoint]:
    return (
        db.query(models.WebhookEndpoint)
        .filter(models.WebhookEndpoint.project_id == project_id)
        .order_by(models.WebhookEndpoint.created_at.asc())
        .all()
    )


def list_subscribed_endpoints(db: Session, *, project_id: uuid.UUID, event_type: str) -> List[models.WebhookEndpoint]:
    """Active endpoints of the project whose scope contains ``event_type``."""
    # scope is a JSON list; filtered in Python so the query stays portable to SQLite
    endpoints = (
        db.query(models.WebhookEndpoint)
        .filter(
            models.WebhookEndpoint.project_id == project_id,
            models.WebhookEndpoint.active.is_(True),
        )
        .all()
    )
    return [e for e in endpoints if event_type in (e.scope or [])]


def set_active(db: Session, endpoint: models.WebhookEndpoint, active: bool) -> models.WebhookEndpoint:
    endpoint.active = active
    db.commit()
    db.refresh(endpoint)
    return endpoint


def delete_endpoint(db: Session, endpoint: models.WebhookEndpoint) -> None:
    db.delete(endpoint)
    db.commit()


def create_delivery(
    db: Session,
    *,
    endpoint_id: uuid.UUID,
    event_id: Optional[uuid.UUID],
    event_type: str,
    payload: dict,
) -> models.WebhookDelivery:
    delivery = models.WebhookDelivery(
        endpoint_id=endpoint_id,
        event_id=event_id,
        event_type=event_type,
        payload=payload,
        status="pending",
        attempt_count=0,
    )
    db.add(delivery)
    db.commit()
    db.refresh(delivery)
    return delivery


def record_attempt(
    db: Session,
    delivery: models.WebhookDelivery,
    *,
    success: bool,
    http_status: Optional[int],
    error: Optional[str],
    next_retry_at: Optional[datetime],
) -> models.WebhookDelivery:
    delivery.attempt_count = (delivery.attempt_count or 0) + 1
    delivery.http_status = http_status
    delivery.error = error
    if success:
        delivery.status = "success"
        delivery.delivered_at = now_utc()
        delivery.next_retry_at = None
    else:
        delivery.status = "failure"
        delivery.next_retry_at = next_retry_at
    db.commit()
    db.refresh(delivery)
    return delivery


def list_due_deliveries(db: Session, *, now: datetime, limit: int = 100) -> List[models.WebhookDelivery]:
    return (
        db.query(models.WebhookDelivery)
        .filter(
            models.WebhookDelivery.status == "failure",
            models.WebhookDelivery.next_retry_at.isnot(None),
            models.WebhookDelivery.next_retry_at <= now,
        )
        .order_by(models.WebhookDelivery.next_retry_at.asc())
        .limit(limit)
        .all()
    )
