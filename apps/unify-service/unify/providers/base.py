"""
Provider adapter plumbing: HTTP client base, response envelope and the
per-object service registry.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

import requests

from unify.db import models
from unify.errors import ProviderRequestError
from unify.utils import token_crypto

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = (3, 60)
_LINK_NEXT_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

T = TypeVar("T")


@dataclass
class ApiResponse(Generic[T]):
    data: T
    message: str
    status_code: int


class ProviderClient:
    """Authenticated JSON client bound to one connection.

    Subclasses set ``provider`` and ``default_base_url`` and may override
    ``auth_headers``.
    """

    provider: str = ""
    default_base_url: str = ""

    def __init__(self, connection: models.Connection) -> None:
        self.connection = connection
        self.base_url = (connection.account_url or self.default_base_url).rstrip("/")

    @property
    def access_token(self) -> Optional[str]:
        return token_crypto.decrypt_credential(self.connection.access_token)

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        headers.update(self.auth_headers())
        headers.update(kwargs.pop("headers", {}) or {})
        url = self.url(path)
        try:
            response = requests.request(method, url, headers=headers, timeout=_DEFAULT_TIMEOUT, **kwargs)
        except requests.RequestException as exc:
            raise ProviderRequestError(self.provider, f"{method} {url} failed: {exc}") from exc
        if response.status_code >= 400:
            raise ProviderRequestError(
                self.provider,
                f"{method} {url} returned an error",
                status=response.status_code,
                body=response.text,
            )
        return response

    def get_json(self, path: str, **kwargs) -> Tuple[Any, requests.Response]:
        response = self.request("GET", path, **kwargs)
        return response.json(), response

    def post_json(self, path: str, payload: Dict[str, Any], **kwargs) -> Tuple[Any, requests.Response]:
        response = self.request("POST", path, json=payload, **kwargs)
        return response.json(), response

    def paginate_link_header(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
        """Yield each page body, following RFC 5988 ``Link: rel="next"`` headers."""
        next_url: Optional[str] = path
        while next_url:
            body, response = self.get_json(next_url, params=params)
            yield body
            params = None  # next links already carry the query string
            match = _LINK_NEXT_RE.search(response.headers.get("Link", "") or "")
            next_url = match.group(1) if match else None


class ServiceRegistry:
    """Provider adapters for one (vertical, object) pair."""

    def __init__(self, vertical: str, object_name: str) -> None:
        self.vertical = vertical
        self.object_name = object_name
        self._services: Dict[str, Any] = {}

    def register(self, provider: str, service: Any) -> None:
        self._services[provider.lower()] = service

    def get_service(self, provider: str) -> Optional[Any]:
        return self._services.get((provider or "").lower())

    def providers(self) -> List[str]:
        return sorted(self._services)


_REGISTRIES: Dict[Tuple[str, str], ServiceRegistry] = {}


def get_registry(vertical: str, object_name: str) -> ServiceRegistry:
    key = (vertical, object_name)
    if key not in _REGISTRIES:
        _REGISTRIES[key] = ServiceRegistry(vertical, object_name)
    return _REGISTRIES[key]
