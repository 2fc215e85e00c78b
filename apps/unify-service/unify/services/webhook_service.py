"""
Outbound webhooks to platform customers.

Each delivery is persisted before it is attempted so failures can be retried
by the scheduler. Bodies are signed with the endpoint secret
(``X-Webhook-Signature``: hex HMAC-SHA256 of the raw body).
"""
from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

import requests
from sqlalchemy.orm import Session

from unify.db import models
from unify.db.repositories import webhooks as webhooks_repo
from unify.utils import token_crypto
from unify.utils.feature_flags import webhooks_enabled

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = (3, 10)
SIGNATURE_HEADER = "X-Webhook-Signature"


def _max_attempts() -> int:
    try:
        return max(1, int(os.getenv("WEBHOOK_MAX_ATTEMPTS", "5")))
    except ValueError:
        return 5


def _backoff_base_seconds() -> int:
    try:
        return max(1, int(os.getenv("WEBHOOK_RETRY_BASE_SECONDS", "60")))
    except ValueError:
        return 60


def _now() -> datetime:
    return datetime.now(timezone.utc)


def build_body(*, event_id: Optional[uuid.UUID], event_type: str, data: Any) -> bytes:
    payload = {"id_event": str(event_id) if event_id else None, "type": event_type, "data": data}
    return json.dumps(payload, default=str, separators=(",", ":")).encode("utf-8")


def _next_retry_at(attempt_count: int) -> Optional[datetime]:
    """Exponential backoff after ``attempt_count`` attempts; None when exhausted."""
    if attempt_count >= _max_attempts():
        return None
    return _now() + timedelta(seconds=_backoff_base_seconds() * (2 ** (attempt_count - 1)))


def deliver(db: Session, delivery: models.WebhookDelivery, endpoint: models.WebhookEndpoint) -> models.WebhookDelivery:
    """POST one delivery and record the outcome."""
    body = json.dumps(delivery.payload, default=str, separators=(",", ":")).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: token_crypto.sign_payload(endpoint.secret, body),
    }
    http_status = None
    error = None
    try:
        response = requests.post(endpoint.url, data=body, headers=headers, timeout=_DEFAULT_TIMEOUT)
        http_status = response.status_code
        success = 200 <= response.status_code < 300
        if not success:
            error = (response.text or "")[:500]
    except requests.RequestException as exc:
        success = False
        error = str(exc)[:500]

    if success:
        logger.info("Webhook %s delivered to %s", delivery.event_type, endpoint.url)
        return webhooks_repo.record_attempt(db, delivery, success=True, http_status=http_status, error=None, next_retry_at=None)

    attempts = (delivery.attempt_count or 0) + 1
    retry_at = _next_retry_at(attempts)
    logger.warning(
        "Webhook %s to %s failed (attempt %d, status %s)%s",
        delivery.event_type, endpoint.url, attempts, http_status,
        "" if retry_at else "; giving up",
    )
    return webhooks_repo.record_attempt(db, delivery, success=False, http_status=http_status, error=error, next_retry_at=retry_at)


def _fan_out(db: Session, *, data: Any, event_type: str, project_id: uuid.UUID, event_id: Optional[uuid.UUID]) -> List[models.WebhookDelivery]:
    if not webhooks_enabled():
        return []
    endpoints = webhooks_repo.list_subscribed_endpoints(db, project_id=project_id, event_type=event_type)
    if not endpoints:
        return []
    payload = json.loads(build_body(event_id=event_id, event_type=event_type, data=data))
    deliveries = []
    for endpoint in endpoints:
        delivery = webhooks_repo.create_delivery(
            db,
            endpoint_id=endpoint.id,
            event_id=event_id,
            event_type=event_type,
            payload=payload,
        )
        deliveries.append(deliver(db, delivery, endpoint))
    return deliveries


def dispatch_webhook(db: Session, *, data: Any, event_type: str, project_id: uuid.UUID, event_id: Optional[uuid.UUID]) -> List[models.WebhookDelivery]:
    """Send a single unified object to every subscribed endpoint of the project."""
    return _fan_out(db, data=data, event_type=event_type, project_id=project_id, event_id=event_id)


def handle_webhook(db: Session, *, data: List[Any], event_type: str, project_id: uuid.UUID, event_id: Optional[uuid.UUID]) -> List[models.WebhookDelivery]:
    """Send the batch of objects stored by one sync run."""
    return _fan_out(db, data=list(data), event_type=event_type, project_id=project_id, event_id=event_id)


def retry_failed_deliveries(db: Session, *, limit: int = 100) -> int:
    """Re-send failed deliveries whose retry time has come; returns the number retried."""
    due = webhooks_repo.list_due_deliveries(db, now=_now(), limit=limit)
    for delivery in due:
        endpoint = webhooks_repo.get_endpoint(db, delivery.endpoint_id)
        if endpoint is None or not endpoint.active:
            webhooks_repo.record_attempt(db, delivery, success=False, http_status=None, error="endpoint inactive", next_retry_at=None)
            continue
        deliver(db, delivery, endpoint)
    return len(due)


def create_endpoint(db: Session, *, project_id: uuid.UUID, url: str, scope: List[str], description: Optional[str] = None) -> models.WebhookEndpoint:
    return webhooks_repo.create_endpoint(
        db,
        project_id=project_id,
        url=url,
        secret=token_crypto.generate_webhook_secret(),
        scope=scope,
        description=description,
    )
