"""Chainable query helpers exposed on models as `Model.objects`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlmodel import SQLModel, col, select

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

ModelT = TypeVar("ModelT", bound=SQLModel)


class ModelQuery(Generic[ModelT]):
    """Immutable wrapper around a `select(Model)` statement."""

    def __init__(self, model: type[ModelT], statement: SelectOfScalar[ModelT] | None = None) -> None:
        self.model = model
        self.statement = statement if statement is not None else select(model)

    def _clone(self, statement: SelectOfScalar[ModelT]) -> ModelQuery[ModelT]:
        return ModelQuery(self.model, statement)

    def filter(self, *criteria: Any) -> ModelQuery[ModelT]:
        return self._clone(self.statement.where(*criteria))

    def filter_by(self, **kwargs: Any) -> ModelQuery[ModelT]:
        return self._clone(self.statement.filter_by(**kwargs))

    def order_by(self, *clauses: Any) -> ModelQuery[ModelT]:
        return self._clone(self.statement.order_by(*clauses))

    def limit(self, count: int) -> ModelQuery[ModelT]:
        return self._clone(self.statement.limit(count))

    async def all(self, session: AsyncSession) -> list[ModelT]:
        return list(await session.exec(self.statement))

    async def first(self, session: AsyncSession) -> ModelT | None:
        return (await session.exec(self.statement)).first()


class ModelManager(Generic[ModelT]):
    """Entry point for building queries against one model class."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def all(self) -> ModelQuery[ModelT]:
        return ModelQuery(self.model)

    def by_id(self, obj_id: Any) -> ModelQuery[ModelT]:
        return self.filter(col(getattr(self.model, "id")) == obj_id)

    def filter(self, *criteria: Any) -> ModelQuery[ModelT]:
        return ModelQuery(self.model).filter(*criteria)

    def filter_by(self, **kwargs: Any) -> ModelQuery[ModelT]:
        return ModelQuery(self.model).filter_by(**kwargs)


class ManagerDescriptor:
    """Class-level descriptor returning a manager bound to the owning model."""

    def __get__(self, instance: object, owner: type[ModelT]) -> ModelManager[ModelT]:
        return ModelManager(owner)
