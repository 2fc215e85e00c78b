"""ORM models grouped by domain, re-exported for ``from unify.db import models``."""
from .base import Base, now_utc
from .tenancy import User, Project, ApiKey, LinkedUser, Connection
from .field_mappings import Attribute, Entity, Value
from .records import RemoteData, Event, WebhookEndpoint, WebhookDelivery
from .ats import AtsInterview, AtsScorecard, AtsCandidateAttachment
from .ticketing import TcgTicket, TcgComment, TcgUser, TcgCollection, TcgTag
from .filestorage import FsFolder, FsGroup
from .marketingautomation import MaAction

__all__ = [
    'Base', 'now_utc',
    'User', 'Project', 'ApiKey', 'LinkedUser', 'Connection',
    'Attribute', 'Entity', 'Value',
    'RemoteData', 'Event', 'WebhookEndpoint', 'WebhookDelivery',
    'AtsInterview', 'AtsScorecard', 'AtsCandidateAttachment',
    'TcgTicket', 'TcgComment', 'TcgUser', 'TcgCollection', 'TcgTag',
    'FsFolder', 'FsGroup',
    'MaAction',
]
