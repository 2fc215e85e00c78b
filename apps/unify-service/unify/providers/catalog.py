"""Static catalog of verticals, their objects and the providers wired for them."""
from __future__ import annotations

from typing import Dict, List

VERTICALS: Dict[str, List[str]] = {
    "ats": ["interview", "scorecard", "attachment"],
    "ticketing": ["ticket", "comment", "user", "collection"],
    "filestorage": ["folder", "group"],
    "marketingautomation": ["action"],
}

PROVIDERS: Dict[str, List[str]] = {
    "ats": ["greenhouse"],
    "ticketing": ["zendesk", "gitlab"],
    "filestorage": ["box"],
    "marketingautomation": [],
}


def providers_for(vertical: str) -> List[str]:
    return list(PROVIDERS.get(vertical, []))


def owner_type(vertical: str, object_name: str) -> str:
    """Resource owner type used by custom field attributes, e.g. 'ats.interview'."""
    return f"{vertical}.{object_name}"
