from . import box
from .services import FolderService, FolderSyncService, GroupService, GroupSyncService

folder_service = FolderService()
group_service = GroupService()


def register() -> None:
    box.register()
    FolderSyncService().register()
    GroupSyncService().register()
