"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from crm_backend.models.clients import Client
from crm_backend.models.projects import Project
from crm_backend.models.tasks import Task
from crm_backend.models.users import User

__all__ = [
    "Client",
    "Project",
    "Task",
    "User",
]
