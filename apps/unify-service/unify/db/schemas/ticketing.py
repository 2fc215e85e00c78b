import uuid
from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel

from .common import UnifiedInput, UnifiedOutput

TicketStatus = Literal["OPEN", "CLOSED"]
TicketPriority = Literal["HIGH", "MEDIUM", "LOW", "URGENT"]


class TicketFields(BaseModel):
    name: Optional[str] = None
    status: Optional[TicketStatus] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    type: Optional[str] = None
    parent_ticket: Optional[uuid.UUID] = None
    collections: Optional[List[uuid.UUID]] = None
    tags: Optional[List[str]] = None
    completed_at: Optional[datetime] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[List[uuid.UUID]] = None


class CommentFields(BaseModel):
    body: Optional[str] = None
    html_body: Optional[str] = None
    is_private: Optional[bool] = None
    creator_type: Optional[Literal["user", "contact"]] = None
    ticket_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    contact_id: Optional[uuid.UUID] = None


class CommentInput(CommentFields, UnifiedInput):
    pass


class CommentOutput(CommentFields, UnifiedOutput):
    pass


class TicketInput(TicketFields, UnifiedInput):
    # Optional first comment pushed along with the ticket
    comment: Optional[CommentInput] = None


class TicketOutput(TicketFields, UnifiedOutput):
    pass
