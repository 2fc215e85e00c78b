import os

# Must be set before the app and database modules are imported
os.environ.setdefault("PYTEST_RUNNING", "1")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("CREDENTIALS_ENCRYPTION_KEY", "test-credentials-passphrase")
os.environ.setdefault("WEBAPP_URL", "http://localhost:3000")
os.environ["SCHEDULER_ENABLED"] = "false"

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from unify.db import models
from unify.db.database import SessionLocal, engine, get_db
from unify.db.repositories import connections as connections_repo
from unify.db.repositories import linked_users as linked_users_repo
from unify.services import auth_service
from unify.utils.feature_flags import refresh_feature_flag_cache
from unify.verticals import bootstrap

bootstrap()


@pytest.fixture(scope="session", autouse=True)
def _schema():
    models.Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def _clean_tables():
    refresh_feature_flag_cache()
    yield
    with engine.begin() as conn:
        for table in reversed(models.Base.metadata.sorted_tables):
            conn.execute(table.delete())
    refresh_feature_flag_cache()


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    from unify.api.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _make_response(status_code=200, json_body=None, headers=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_body if json_body is not None else {}
    response.headers = headers or {}
    response.text = text if text is not None else ""
    return response


@pytest.fixture
def user(db_session):
    return auth_service.register(
        db_session, email="owner@example.com", password="password123", first_name="Ada", last_name="Owner"
    )


@pytest.fixture
def project(db_session, user):
    from unify.db.repositories import users as users_repo

    return users_repo.list_projects_for_user(db_session, user.id)[0]


@pytest.fixture
def api_key(db_session, user, project):
    _key, raw_key = auth_service.generate_api_key_for_user(db_session, user_id=user.id, project_id=project.id, name="test")
    return raw_key


@pytest.fixture
def linked_user(db_session, project):
    return linked_users_repo.create_linked_user(
        db_session, project_id=project.id, linked_user_origin_id="customer-user-1", alias="Acme"
    )


@pytest.fixture
def make_connection(db_session, project, linked_user):
    def _make(provider: str, vertical: str, account_url=None):
        return connections_repo.upsert_connection(
            db_session,
            project_id=project.id,
            linked_user_id=linked_user.id,
            provider_slug=provider,
            vertical=vertical,
            token_type="api_key",
            access_token=f"{provider}-secret-token",
            account_url=account_url,
        )

    return _make


@pytest.fixture
def api_headers(api_key):
    def _headers(connection=None):
        headers = {"x-api-key": api_key}
        if connection is not None:
            headers["x-connection-token"] = connection.connection_token
        return headers

    return _headers


@pytest.fixture
def fake_response():
    """Factory for ``requests.Response`` stand-ins returned by patched HTTP calls."""
    return _make_response
