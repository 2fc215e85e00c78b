"""
Platform authentication: users, JWT access tokens, project API keys and
password recovery.
"""
from __future__ import annotations

import logging
import os
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import bcrypt
import jwt
from sqlalchemy.orm import Session

from unify.db import models
from unify.db.repositories import api_keys as api_keys_repo
from unify.db.repositories import users as users_repo
from unify.errors import Conflict, InvalidCredentials, InvalidToken, ObjectNotFound
from unify.services import email_service
from unify.utils import token_crypto
from unify.utils.urls import build_password_reset_link

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = timedelta(days=1)
API_KEY_TTL = timedelta(days=365)
RESET_TOKEN_TTL = timedelta(hours=1)
_BCRYPT_ROUNDS = 10


def get_jwt_secret() -> str:
    secret = os.environ.get("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET environment variable not set")
    return secret


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _access_token(user: models.User, project_id: uuid.UUID) -> str:
    now = _now()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "id_project": str(project_id),
        "iat": now,
        "exp": now + ACCESS_TOKEN_TTL,
    }
    return jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict:
    """Decode a user access token; raises InvalidCredentials when invalid or expired."""
    try:
        payload = jwt.decode(token, get_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise InvalidCredentials("Invalid or expired access token") from exc
    if "id_project" not in payload:
        raise InvalidCredentials("Not a user access token")
    return payload


def register(db: Session, *, email: str, password: str, first_name: Optional[str] = None, last_name: Optional[str] = None) -> models.User:
    if users_repo.get_user_by_email(db, email):
        raise Conflict("Email already exists")
    user, project = users_repo.create_user_with_project(
        db,
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    logger.info("Registered user %s with default project %s", user.id, project.id)
    return user


def login(db: Session, *, email: str, password: str) -> Tuple[models.User, str]:
    user = users_repo.get_user_by_email(db, email)
    if user is None:
        raise InvalidCredentials("Invalid email or password")
    projects = users_repo.list_projects_for_user(db, user.id)
    if not projects:
        raise InvalidCredentials("User has no project")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials("Invalid email or password")
    return user, _access_token(user, projects[0].id)


def refresh_access_token(db: Session, *, project_id: uuid.UUID, user: models.User) -> str:
    project = users_repo.get_project(db, project_id)
    if project is None or project.user_id != user.id:
        raise ObjectNotFound("Project not found")
    return _access_token(user, project.id)


def get_users(db: Session) -> List[models.User]:
    return users_repo.list_users(db)


def verify_user(db: Session, user_id: uuid.UUID) -> models.User:
    user = users_repo.get_user(db, user_id)
    if user is None:
        raise ObjectNotFound("User not found")
    return user


def generate_api_key_for_user(db: Session, *, user_id: uuid.UUID, project_id: uuid.UUID, name: Optional[str] = None) -> Tuple[models.ApiKey, str]:
    """Issue a project API key; the raw key is returned once and only its hash is stored."""
    user = verify_user(db, user_id)
    project = users_repo.get_project(db, project_id)
    if project is None or project.user_id != user.id:
        raise ObjectNotFound("Project not found")
    now = _now()
    payload = {
        "sub": str(user.id),
        "project_id": str(project.id),
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + API_KEY_TTL,
    }
    raw_key = jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALGORITHM)
    key = api_keys_repo.create_api_key(
        db,
        api_key_hash=token_crypto.hash_api_key(raw_key),
        project_id=project.id,
        user_id=user.id,
        name=name,
    )
    return key, raw_key


def validate_api_key(db: Session, api_key: str) -> models.ApiKey:
    """Return the stored key when the JWT verifies and matches its record."""
    try:
        payload = jwt.decode(api_key, get_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise InvalidCredentials("Invalid API key") from exc
    stored = api_keys_repo.get_by_hash(db, token_crypto.hash_api_key(api_key))
    if stored is None:
        raise InvalidCredentials("Invalid API key")
    if str(stored.project_id) != payload.get("project_id") or str(stored.user_id) != payload.get("sub"):
        raise InvalidCredentials("API key does not match its project")
    return stored


def get_project_id_for_api_key(db: Session, api_key: str) -> uuid.UUID:
    return validate_api_key(db, api_key).project_id


def list_api_keys(db: Session, *, project_id: uuid.UUID) -> List[models.ApiKey]:
    return api_keys_repo.list_for_project(db, project_id)


def delete_api_key(db: Session, *, api_key_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> None:
    """Delete a key; when ``user_id`` is given, keys of other users count as missing."""
    key = api_keys_repo.get_api_key(db, api_key_id)
    if key is None or (user_id is not None and key.user_id != user_id):
        raise ObjectNotFound("API key not found")
    api_keys_repo.delete_api_key(db, api_key_id)


def _send_reset_email(email: str, first_name: Optional[str], reset_link: str) -> None:
    try:
        result = email_service.send_password_reset_email(email, first_name, reset_link)
        if not result.get("success"):
            logger.warning("Password reset email to %s not sent: %s", email, result.get("error"))
    except Exception:
        logger.exception("Password reset email to %s failed", email)


def initiate_password_recovery(db: Session, *, email: str) -> None:
    user = users_repo.get_user_by_email(db, email)
    if user is None:
        raise ObjectNotFound("User not found")
    token = token_crypto.generate_reset_token()
    users_repo.set_reset_token(db, user, token=token, expires_at=_now() + RESET_TOKEN_TTL)
    link = build_password_reset_link(token=token, email=user.email)
    # Mail goes out on a worker thread so the request does not wait on SMTP
    threading.Thread(target=_send_reset_email, args=(user.email, user.first_name, link), daemon=True).start()


def reset_password(db: Session, *, email: str, reset_token: str, new_password: str) -> models.User:
    user = users_repo.get_user_by_email(db, email)
    if user is None or not user.reset_token or user.reset_token != reset_token:
        raise InvalidToken("Invalid reset token")
    expiry = _as_aware(user.reset_token_expiry)
    if expiry is None or expiry < _now():
        raise InvalidToken("Reset token has expired")
    return users_repo.update_password(db, user, password_hash=hash_password(new_password))
