"""
URL utilities for links sent in emails.

Primary source: WEBAPP_URL (e.g., https://app.example.com).
"""
from __future__ import annotations

import os
from urllib.parse import urlencode


def _add_scheme_if_missing(host: str) -> str:
    h = host.strip()
    if h.startswith("http://") or h.startswith("https://"):
        return h
    lower = h.lower()
    if lower.startswith("localhost") or lower.startswith("127.0.0.1"):
        return f"http://{h}"
    return f"https://{h}"


def get_webapp_url() -> str:
    """Return the normalized dashboard base URL, defaulting to localhost."""
    base = os.getenv("WEBAPP_URL")
    if base and base.strip():
        return _add_scheme_if_missing(base).rstrip("/")
    return "http://localhost:3000"


def build_password_reset_link(*, token: str, email: str) -> str:
    qs = urlencode({"token": token, "email": email})
    return f"{get_webapp_url()}/reset-password?{qs}"
