"""Entity store access layer.

A thin, document-style facade over one ``AsyncSession``: get by id, get a
child row scoped under a parent, stage puts and deletes, and equality
queries. Every call made inside ``run_in_transaction`` shares the session's
transaction, so reads observe earlier staged writes (autoflush) and the
whole unit either commits or rolls back.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from brightminds.config import settings
from brightminds.core.exceptions import DomainError, MappingError, TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class EntityStore:
    """Collection-style access to ORM entities within the current transaction"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, model: Type[T], entity_id: Any) -> Optional[T]:
        """Load one entity by primary key, or None"""
        try:
            return await self.db.get(model, entity_id)
        except LookupError as exc:
            raise MappingError(
                f"{model.__name__} {entity_id} could not be decoded: {exc}"
            ) from exc

    async def get_child(self, model: Type[T], parent_id: str, child_id: str) -> Optional[T]:
        """Load a sub-entity keyed under a parent (e.g. an assigned game under its classroom)"""
        parent_col = getattr(model, model.__parent_key__)
        child_col = getattr(model, model.__child_key__)
        rows = await self._fetch(
            select(model).where(parent_col == parent_id, child_col == child_id).limit(1)
        )
        return rows[0] if rows else None

    async def query_equal(
        self,
        model: Type[T],
        field: str,
        value: Any,
        limit: Optional[int] = None,
        **equalities: Any,
    ) -> List[T]:
        """Entities where ``field == value`` (and every extra keyword equality holds)"""
        stmt = select(model).where(getattr(model, field) == value)
        for name, expected in equalities.items():
            stmt = stmt.where(getattr(model, name) == expected)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._fetch(stmt)

    async def first_equal(self, model: Type[T], field: str, value: Any) -> Optional[T]:
        rows = await self.query_equal(model, field, value, limit=1)
        return rows[0] if rows else None

    async def count_equal(self, model: Type[T], **equalities: Any) -> int:
        stmt = select(func.count()).select_from(model)
        for name, expected in equalities.items():
            stmt = stmt.where(getattr(model, name) == expected)
        return (await self.db.scalar(stmt)) or 0

    def put(self, entity: Any) -> None:
        """Stage an insert or update.

        Updates to an existing row refresh ``updated_at`` and bump the row
        version even when no other column changed.
        """
        if entity in self.db and hasattr(entity, "updated_at"):
            entity.updated_at = func.now()
        self.db.add(entity)

    async def delete(self, entity: Any) -> None:
        await self.db.delete(entity)

    async def _fetch(self, stmt) -> list:
        try:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except LookupError as exc:
            raise MappingError(f"Stored record could not be decoded: {exc}") from exc


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[EntityStore], Awaitable[R]],
    *,
    max_attempts: Optional[int] = None,
) -> R:
    """
    Run ``work`` as one atomic unit and commit it.

    The body is re-executed from scratch after an optimistic-concurrency
    conflict (a stale row version) or a uniqueness race, so it must only
    touch the store it is given. Domain errors roll back and propagate
    unchanged; other store failures become ``TransientStoreError``.

    Args:
        db: Database session
        work: Coroutine function receiving an ``EntityStore``
        max_attempts: Override for ``TRANSACTION_MAX_ATTEMPTS``

    Returns:
        Whatever ``work`` returned on the committed attempt
    """
    attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS
    last_error: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        store = EntityStore(db)
        try:
            result = await work(store)
            await db.commit()
            return result
        except DomainError:
            await db.rollback()
            raise
        except (StaleDataError, IntegrityError) as exc:
            await db.rollback()
            last_error = exc
            logger.warning(
                "Transaction conflict, retrying",
                extra={"attempt": attempt, "max_attempts": attempts, "error": str(exc)},
            )
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Store transaction failed: %s", exc)
            raise TransientStoreError("Store transaction failed", cause=exc) from exc

    raise TransientStoreError(
        f"Transaction aborted after {attempts} conflicting attempts", cause=last_error
    ) from last_error
