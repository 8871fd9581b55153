"""Small generic persistence helpers shared by services and auth."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, select

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

ModelT = TypeVar("ModelT", bound=SQLModel)


async def get_or_create(
    session: AsyncSession,
    model: type[ModelT],
    *,
    defaults: dict[str, Any] | None = None,
    **lookup: Any,
) -> tuple[ModelT, bool]:
    """Fetch the row matching `lookup`, creating it with `defaults` when missing."""
    statement = select(model).filter_by(**lookup)
    existing = (await session.exec(statement)).first()
    if existing is not None:
        return existing, False

    instance = model(**lookup, **(defaults or {}))
    session.add(instance)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same lookup key.
        await session.rollback()
        existing = (await session.exec(statement)).first()
        if existing is None:
            raise
        return existing, False
    await session.refresh(instance)
    return instance, True
