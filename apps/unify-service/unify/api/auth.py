"""
Platform authentication endpoints: registration, login, project API keys and
password recovery.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unify.api.deps import ensure_project_owner, get_current_user
from unify.db import schemas
from unify.db.database import get_db
from unify.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def register_endpoint(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    return auth_service.register(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )


@router.post("/login", response_model=schemas.LoginResponse)
def login_endpoint(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user, token = auth_service.login(db, email=payload.email, password=payload.password)
    return {"user": user, "access_token": token, "token_type": "bearer"}


@router.post("/refresh-token", response_model=schemas.LoginResponse)
def refresh_token_endpoint(
    payload: schemas.RefreshTokenRequest,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user),
):
    user, _claims = user_context
    token = auth_service.refresh_access_token(db, project_id=payload.project_id, user=user)
    return {"user": user, "access_token": token, "token_type": "bearer"}


@router.get("/users", response_model=List[schemas.UserOut])
def list_users_endpoint(db: Session = Depends(get_db), user_context=Depends(get_current_user)):
    return auth_service.get_users(db)


@router.post("/api-keys", response_model=schemas.ApiKeyCreateResponse, status_code=status.HTTP_201_CREATED)
def create_api_key_endpoint(
    payload: schemas.ApiKeyCreateRequest,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user),
):
    user, _claims = user_context
    key, raw_key = auth_service.generate_api_key_for_user(
        db, user_id=user.id, project_id=payload.project_id, name=payload.name
    )
    out = schemas.ApiKeyResponse.model_validate(key).model_dump()
    out["api_key"] = raw_key
    return out


@router.get("/api-keys", response_model=List[schemas.ApiKeyResponse])
def list_api_keys_endpoint(
    project_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user),
):
    user, _claims = user_context
    ensure_project_owner(db, user, project_id)
    return auth_service.list_api_keys(db, project_id=project_id)


@router.delete("/api-keys/{api_key_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api_key_endpoint(
    api_key_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user),
):
    user, _claims = user_context
    auth_service.delete_api_key(db, api_key_id=api_key_id, user_id=user.id)
    return None


@router.post("/password-reset-request")
def password_reset_request_endpoint(payload: schemas.PasswordResetRequest, db: Session = Depends(get_db)):
    auth_service.initiate_password_recovery(db, email=payload.email)
    return {"message": "Password reset email sent"}


@router.post("/reset-password")
def reset_password_endpoint(payload: schemas.ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(
        db,
        email=payload.email,
        reset_token=payload.reset_token,
        new_password=payload.new_password,
    )
    return {"message": "Password reset successfully"}
