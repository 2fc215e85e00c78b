from . import greenhouse
from .services import (
    AttachmentService,
    AttachmentSyncService,
    InterviewService,
    InterviewSyncService,
    ScoreCardService,
    ScoreCardSyncService,
)

interview_service = InterviewService()
scorecard_service = ScoreCardService()
attachment_service = AttachmentService()


def register() -> None:
    greenhouse.register()
    InterviewSyncService().register()
    ScoreCardSyncService().register()
    AttachmentSyncService().register()
