"""Base model class exposing the chainable `objects` query manager."""

from __future__ import annotations

from typing import ClassVar

from sqlmodel import SQLModel

from crm_backend.db.query_manager import ManagerDescriptor


class QueryModel(SQLModel, table=False):
    """SQLModel base whose subclasses are queried via `Model.objects`."""

    objects: ClassVar[ManagerDescriptor] = ManagerDescriptor()
