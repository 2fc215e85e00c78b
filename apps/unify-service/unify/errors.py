"""
Domain exceptions.

Services raise these; the API layer maps ``status_code`` onto the HTTP
response through a single exception handler.
"""
from __future__ import annotations

from typing import Optional


class UnifyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ObjectNotFound(UnifyError):
    status_code = 404


class ConnectionNotFound(ObjectNotFound):
    pass


class InvalidCursor(UnifyError):
    status_code = 400


class MissingRemoteId(UnifyError):
    status_code = 400


class Conflict(UnifyError):
    status_code = 409


class InvalidCredentials(UnifyError):
    status_code = 401


class InvalidInput(UnifyError):
    status_code = 400


class InvalidToken(UnifyError):
    status_code = 400


class ProviderNotSupported(UnifyError):
    status_code = 422

    def __init__(self, provider: str, vertical: str, object_name: str):
        super().__init__(f"Provider '{provider}' is not supported for {vertical}.{object_name}")
        self.provider = provider


class MapperNotFound(UnifyError):
    status_code = 422

    def __init__(self, vertical: str, object_name: str, provider: str):
        super().__init__(f"No mapper registered for {vertical}.{object_name} with provider '{provider}'")


class ProviderRequestError(UnifyError):
    status_code = 502

    def __init__(self, provider: str, message: str, status: Optional[int] = None, body: Optional[str] = None):
        detail = f"{provider}: {message}"
        if status is not None:
            detail += f" (HTTP {status})"
        super().__init__(detail)
        self.provider = provider
        self.status = status
        self.body = (body or "")[:500]
