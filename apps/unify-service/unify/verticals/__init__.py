"""
Vertical wiring: provider adapters, mappers, unified services and sync
services are registered once at startup by ``bootstrap()``.
"""
from __future__ import annotations

_BOOTSTRAPPED = False


def bootstrap() -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return
    from . import ats, filestorage, marketingautomation, ticketing

    for vertical in (ats, ticketing, filestorage, marketingautomation):
        vertical.register()
    _BOOTSTRAPPED = True
