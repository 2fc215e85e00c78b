"""Marketing automation actions. No provider implements actions yet."""
from __future__ import annotations

from unify.db import models, schemas
from unify.services.base import UnifiedObjectService
from unify.services.sync import BaseSyncService


class ActionService(UnifiedObjectService):
    vertical = "marketingautomation"
    object_name = "action"
    model = models.MaAction
    output_schema = schemas.ActionOutput
    url = "/marketingautomation/actions"


class ActionSyncService(BaseSyncService):
    vertical = "marketingautomation"
    object_name = "action"
    model = models.MaAction
    output_schema = schemas.ActionOutput
