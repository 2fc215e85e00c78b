"""
Manual resync: run every registered sync service for the owner of the API
key's project.
"""
import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from unify.api.deps import get_api_key_project
from unify.db.database import get_db
from unify.db.repositories import users as users_repo
from unify.errors import ObjectNotFound
from unify.unification.registry import sync_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/resync")
def resync_endpoint(
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    project = users_repo.get_project(db, project_id)
    if project is None:
        raise ObjectNotFound("Project not found")
    results = {}
    for vertical, object_name, service in sync_registry.all():
        results[f"{vertical}.{object_name}"] = service.sync(db, user_id=project.user_id)
    logger.info("Manual resync for project %s: %s", project_id, results)
    return {"results": results}
