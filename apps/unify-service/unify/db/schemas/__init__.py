"""
Domain-split Pydantic schemas re-exported for ``from unify.db import schemas``.
"""
from .common import Paginated, UnifiedInput, UnifiedOutput
from .auth import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    UserOut,
    RefreshTokenRequest,
    ApiKeyCreateRequest,
    ApiKeyResponse,
    ApiKeyCreateResponse,
    PasswordResetRequest,
    ResetPasswordRequest,
)
from .tenancy import LinkedUserCreate, LinkedUserOut, ConnectionCreate, ConnectionOut
from .field_mappings import DefineFieldRequest, MapFieldRequest, AttributeOut
from .webhooks import WebhookCreate, WebhookUpdate, WebhookOut, WebhookCreateResponse
from .ats import (
    InterviewInput,
    InterviewOutput,
    ScoreCardInput,
    ScoreCardOutput,
    AttachmentInput,
    AttachmentOutput,
)
from .ticketing import TicketInput, TicketOutput, CommentInput, CommentOutput
from .filestorage import FolderInput, FolderOutput, GroupOutput
from .marketingautomation import ActionInput, ActionOutput
