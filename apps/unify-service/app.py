"""
App assembly entry point.

Re-exports the FastAPI `app` from `unify.api.main` for `uvicorn app:app`.
"""

from unify.api.main import app  # noqa: F401
