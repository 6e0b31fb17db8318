"""SQLAlchemy repository implementations."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from package_tracker.contrib.sqlalchemy.models import (
    Base,
    PackageModel,
    RecipientModel,
)
from package_tracker.exceptions import DuplicateKeyError, PersistenceError

ModelT = TypeVar("ModelT", bound=Base)

# Key columns are 64-bit signed integers.
MIN_KEY = -(2**63)
MAX_KEY = 2**63 - 1

# SQLite and PostgreSQL report "UNIQUE constraint failed" / "violates
# unique constraint"; MySQL and MariaDB report "Duplicate entry".
_UNIQUE_MARKERS = ("unique", "duplicate entry")


def is_storable_key(value: int) -> bool:
    return MIN_KEY <= value <= MAX_KEY


def is_unique_violation(message: str) -> bool:
    message = message.lower()
    return any(marker in message for marker in _UNIQUE_MARKERS)


class _KeyedRepository(Generic[ModelT]):
    """Rows addressed by one unique integer column.

    A key outside the 64-bit column range cannot be stored, so lookups
    treat it as absent instead of sending it to the driver.
    """

    model: type[ModelT]
    key: str

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    @property
    def _key_column(self) -> Any:
        return getattr(self.model, self.key)

    async def _commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            if is_unique_violation(str(exc.orig)):
                raise DuplicateKeyError(self.key, str(exc.orig)) from exc
            raise PersistenceError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            await session.rollback()
            raise PersistenceError(str(exc)) from exc

    async def _get_by_key(self, value: int) -> ModelT | None:
        if not is_storable_key(value):
            return None
        async with self.session_factory() as session:
            result = await session.execute(
                select(self.model).where(self._key_column == value)
            )
            return result.scalar_one_or_none()

    async def list_all(self) -> list[ModelT]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(self.model).order_by(self._key_column)
            )
            return list(result.scalars().all())

    async def create(self, **fields: Any) -> ModelT:
        record = self.model(**fields)
        async with self.session_factory() as session:
            session.add(record)
            await self._commit(session)
            await session.refresh(record)
        return record

    async def create_many(
        self, items: Sequence[dict[str, Any]]
    ) -> list[ModelT]:
        """Insert every item in one transaction, or none of them."""
        records = [self.model(**fields) for fields in items]
        async with self.session_factory() as session:
            session.add_all(records)
            await self._commit(session)
            for record in records:
                await session.refresh(record)
        return records

    async def update(self, key: int, **fields: Any) -> ModelT | None:
        if not is_storable_key(key):
            return None
        async with self.session_factory() as session:
            result = await session.execute(
                select(self.model).where(self._key_column == key)
            )
            record = result.scalar_one_or_none()
            if record is None:
                return None
            for name, value in fields.items():
                if hasattr(record, name):
                    setattr(record, name, value)
            await self._commit(session)
            await session.refresh(record)
            return record

    async def delete(self, key: int) -> bool:
        if not is_storable_key(key):
            return False
        async with self.session_factory() as session:
            result = await session.execute(
                delete(self.model).where(self._key_column == key)
            )
            await self._commit(session)
            return result.rowcount > 0

    async def find_existing(self, keys: Sequence[int]) -> list[int]:
        keys = [key for key in keys if is_storable_key(key)]
        if not keys:
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(self._key_column).where(self._key_column.in_(keys))
            )
            return list(result.scalars().all())

    async def delete_many(self, keys: Sequence[int]) -> int:
        keys = [key for key in keys if is_storable_key(key)]
        if not keys:
            return 0
        async with self.session_factory() as session:
            result = await session.execute(
                delete(self.model).where(self._key_column.in_(keys))
            )
            await self._commit(session)
            return result.rowcount


class SQLAlchemyPackageRepository(_KeyedRepository[PackageModel]):
    """Package repository backed by SQLAlchemy async sessions."""

    model = PackageModel
    key = "tracking_number"

    async def get_max_tracking_number(self) -> int | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.max(PackageModel.tracking_number))
            )
            return result.scalar_one_or_none()

    async def get_by_tracking_number(
        self, tracking_number: int
    ) -> PackageModel | None:
        return await self._get_by_key(tracking_number)


class SQLAlchemyRecipientRepository(_KeyedRepository[RecipientModel]):
    """Recipient repository backed by SQLAlchemy async sessions."""

    model = RecipientModel
    key = "recipient_contact"

    async def get_by_id(self, recipient_id: str) -> RecipientModel | None:
        async with self.session_factory() as session:
            return await session.get(RecipientModel, recipient_id)

    async def get_by_contact(self, contact: int) -> RecipientModel | None:
        return await self._get_by_key(contact)
