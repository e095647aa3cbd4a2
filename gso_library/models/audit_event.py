from typing import Optional
from sqlmodel import Field, SQLModel
from gso_library.models.base import CreatedAtModel


class AuditEvent(CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'audit_events'

    id: Optional[int] = Field(default=None, primary_key=True)
    event_type: str = Field(index=True)
    username: Optional[str] = Field(default=None, index=True)
    target_username: Optional[str] = None
    ip_address: Optional[str] = None
    detail: Optional[str] = None
