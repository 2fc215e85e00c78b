from .services import ActionService, ActionSyncService

action_service = ActionService()


def register() -> None:
    ActionSyncService().register()
