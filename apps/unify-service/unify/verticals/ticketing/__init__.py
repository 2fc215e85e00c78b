from . import gitlab, zendesk
from .services import (
    CollectionSyncService,
    CommentService,
    CommentSyncService,
    TicketService,
    TicketSyncService,
    UserSyncService,
)

ticket_service = TicketService()
comment_service = CommentService()


def register() -> None:
    zendesk.register()
    gitlab.register()
    # Lookups used by ticket and comment mappers need users and collections first
    UserSyncService().register()
    CollectionSyncService().register()
    TicketSyncService().register()
    CommentSyncService().register()
