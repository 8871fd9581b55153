"""Client model; VIP clients raise the priority of their work."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from crm_backend.core.time import utcnow
from crm_backend.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

CLIENT_TYPE_REGULAR = "regular"
CLIENT_TYPE_VIP = "vip"


class Client(QueryModel, table=True):
    """Customer record owned by a single user."""

    __tablename__ = "clients"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    name: str
    email: str | None = None
    client_type: str = Field(default=CLIENT_TYPE_REGULAR)  # regular | vip
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_vip(self) -> bool:
        return (self.client_type or "").strip().lower() == CLIENT_TYPE_VIP
