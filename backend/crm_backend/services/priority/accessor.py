"""Persistence boundary for priority scoring.

The engine and ranking services depend only on `PriorityDataAccessor`.
`SqlPriorityDataAccessor` implements it over SQLModel; tests substitute
in-memory fakes. Reads return detached snapshots, so a rollback after a
failed write never invalidates the rows still waiting to be scored.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from crm_backend.core.logging import get_logger
from crm_backend.models.clients import Client
from crm_backend.models.projects import Project
from crm_backend.models.tasks import Task
from crm_backend.models.users import User
from crm_backend.services.priority.errors import EntityNotFoundError, UnknownUserError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlmodel.ext.asyncio.session import AsyncSession

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserRef:
    """Identity of a user iterated by all-users recalculation runs."""

    id: UUID
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class TaskSnapshot:
    """Scoring-relevant view of a task, with its client already resolved."""

    id: UUID
    user_id: UUID
    title: str
    status: str
    priority: str | None = None
    due_date: datetime | None = None
    project_id: UUID | None = None
    client_id: UUID | None = None
    client_name: str | None = None
    client_is_vip: bool = False
    budget: float | None = None
    priority_score: int | None = None
    priority_label: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ProjectSnapshot:
    """Scoring-relevant view of a project, with its client already resolved."""

    id: UUID
    user_id: UUID
    name: str
    stage: str
    status: str = "active"
    priority: str | None = None
    deadline: datetime | None = None
    budget: float | None = None
    client_id: UUID | None = None
    client_name: str | None = None
    client_is_vip: bool = False
    priority_score: int | None = None
    priority_label: str | None = None
    created_at: datetime | None = None


class PriorityDataAccessor(Protocol):
    """Operations the priority services need from persistence."""

    async def list_users(self) -> list[UserRef]: ...

    async def list_tasks_for_user(self, user_id: UUID) -> list[TaskSnapshot]: ...

    async def list_projects_for_user(self, user_id: UUID) -> list[ProjectSnapshot]: ...

    async def update_task_score(
        self,
        task_id: UUID,
        score: int,
        label: str,
        calculated_at: datetime,
    ) -> None: ...

    async def update_project_score(
        self,
        project_id: UUID,
        score: int,
        label: str,
        calculated_at: datetime,
    ) -> None: ...


class SqlPriorityDataAccessor:
    """`PriorityDataAccessor` backed by an async SQLModel session.

    Every score write commits on its own so an interrupted run keeps the
    scores it already wrote. Any database error, on a read or a write, rolls
    the session back before it propagates; one session serves a whole
    all-users run, and an aborted transaction would otherwise fail every
    statement issued after it.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _rollback_on_error(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError:
            logger.warning(
                "priority.accessor.rolled_back",
                extra={"operation": operation},
                exc_info=True,
            )
            await self._session.rollback()
            raise

    async def list_users(self) -> list[UserRef]:
        async with self._rollback_on_error("list_users"):
            users = await User.objects.all().order_by(
                col(User.created_at),
                col(User.id),
            ).all(self._session)
        return [UserRef(id=user.id, name=user.name, email=user.email) for user in users]

    async def _require_user(self, user_id: UUID) -> None:
        user = await User.objects.by_id(user_id).first(self._session)
        if user is None:
            raise UnknownUserError(user_id)

    async def _clients_by_id(self, user_id: UUID) -> dict[UUID, Client]:
        clients = await Client.objects.filter_by(user_id=user_id).all(self._session)
        return {client.id: client for client in clients}

    async def list_tasks_for_user(self, user_id: UUID) -> list[TaskSnapshot]:
        async with self._rollback_on_error("list_tasks_for_user"):
            await self._require_user(user_id)
            clients = await self._clients_by_id(user_id)
            projects = {
                project.id: project
                for project in await Project.objects.filter_by(user_id=user_id).all(self._session)
            }
            tasks = await Task.objects.filter_by(user_id=user_id).all(self._session)
            return [_task_snapshot(task, clients=clients, projects=projects) for task in tasks]

    async def list_projects_for_user(self, user_id: UUID) -> list[ProjectSnapshot]:
        async with self._rollback_on_error("list_projects_for_user"):
            await self._require_user(user_id)
            clients = await self._clients_by_id(user_id)
            projects = await Project.objects.filter_by(user_id=user_id).all(self._session)
            return [_project_snapshot(project, clients=clients) for project in projects]

    async def get_task_snapshot(self, task_id: UUID) -> TaskSnapshot:
        """Load one task with its client resolved, scoped to the task's owner."""
        async with self._rollback_on_error("get_task_snapshot"):
            task = await Task.objects.by_id(task_id).first(self._session)
            if task is None:
                raise EntityNotFoundError("task", task_id)
            clients = await self._clients_by_id(task.user_id)
            projects: dict[UUID, Project] = {}
            if task.project_id is not None:
                project = await Project.objects.filter_by(
                    id=task.project_id,
                    user_id=task.user_id,
                ).first(self._session)
                if project is not None:
                    projects[project.id] = project
            return _task_snapshot(task, clients=clients, projects=projects)

    async def update_task_score(
        self,
        task_id: UUID,
        score: int,
        label: str,
        calculated_at: datetime,
    ) -> None:
        async with self._rollback_on_error("update_task_score"):
            task = await self._session.get(Task, task_id)
            if task is None:
                raise EntityNotFoundError("task", task_id)
            task.priority_score = score
            task.priority_label = label
            task.priority_calculated_at = calculated_at
            self._session.add(task)
            await self._session.commit()

    async def update_project_score(
        self,
        project_id: UUID,
        score: int,
        label: str,
        calculated_at: datetime,
    ) -> None:
        async with self._rollback_on_error("update_project_score"):
            project = await self._session.get(Project, project_id)
            if project is None:
                raise EntityNotFoundError("project", project_id)
            project.priority_score = score
            project.priority_label = label
            project.priority_calculated_at = calculated_at
            self._session.add(project)
            await self._session.commit()


def _task_snapshot(
    task: Task,
    *,
    clients: dict[UUID, Client],
    projects: dict[UUID, Project],
) -> TaskSnapshot:
    project = projects.get(task.project_id) if task.project_id is not None else None
    # A task's own client wins; otherwise it inherits its project's client.
    client_id = task.client_id
    if client_id is None and project is not None:
        client_id = project.client_id
    client = clients.get(client_id) if client_id is not None else None
    return TaskSnapshot(
        id=task.id,
        user_id=task.user_id,
        title=task.title,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        project_id=task.project_id,
        client_id=client.id if client is not None else None,
        client_name=client.name if client is not None else None,
        client_is_vip=client.is_vip if client is not None else False,
        budget=project.budget if project is not None else None,
        priority_score=task.priority_score,
        priority_label=task.priority_label,
        created_at=task.created_at,
    )


def _project_snapshot(project: Project, *, clients: dict[UUID, Client]) -> ProjectSnapshot:
    client = clients.get(project.client_id) if project.client_id is not None else None
    return ProjectSnapshot(
        id=project.id,
        user_id=project.user_id,
        name=project.name,
        stage=project.stage,
        status=project.status,
        priority=project.priority,
        deadline=project.deadline,
        budget=project.budget,
        client_id=client.id if client is not None else None,
        client_name=client.name if client is not None else None,
        client_is_vip=client.is_vip if client is not None else False,
        priority_score=project.priority_score,
        priority_label=project.priority_label,
        created_at=project.created_at,
    )
