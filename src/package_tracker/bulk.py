"""Add-many, update-many, delete-many and file import.

Add-many is all-or-nothing: every item is checked before anything is
inserted, and the insert itself is a single batch. Update-many and
delete-many work item by item and never roll back what was applied.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from package_tracker.allocator import allocate_and_insert
from package_tracker.exceptions import (
    BatchInsertError,
    BulkItemError,
    DuplicateKeyError,
    ImportParseError,
    InvalidBulkInputError,
    NotFoundError,
    PayloadTooLargeError,
    RecipientNotFoundError,
    ValidationFailedError,
)
from package_tracker.protocols import (
    Package,
    PackageRepository,
    Recipient,
    RecipientRepository,
)
from package_tracker.schemas import PackageFields, RecipientFields, parse_fields
from package_tracker.services import PackageService, RecipientService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DeleteManyResult:
    deleted_count: int
    not_found: list[int] = field(default_factory=list)


@dataclass
class UpdateManyResult(Generic[T]):
    updated: list[T] = field(default_factory=list)
    not_found: list[int] = field(default_factory=list)


def ensure_items(items: Any, noun: str) -> list[Any]:
    if not isinstance(items, list) or not items:
        raise InvalidBulkInputError(
            f"Invalid input. An array of {noun} is required."
        )
    return items


def as_key(value: Any) -> int | None:
    """Return ``value`` as an integer key, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def ensure_numeric_keys(keys: Any, noun: str) -> list[int]:
    """Validate a delete-many key list; duplicates are dropped, order kept."""
    ensure_items(keys, noun)
    numbers = [as_key(key) for key in keys]
    if any(number is None for number in numbers):
        raise InvalidBulkInputError(f"All {noun} must be numeric values.")
    return list(dict.fromkeys(numbers))


def parse_import(raw: bytes | None, noun: str, max_size: int) -> list[Any]:
    """Decode a JSON import file into a non-empty list of raw items."""
    if raw is None:
        raise InvalidBulkInputError("File is required.")
    if len(raw) > max_size:
        raise PayloadTooLargeError(
            f"Import file exceeds the {max_size} byte limit."
        )
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("Import of %s failed to parse: %s", noun, exc)
        raise ImportParseError(f"Invalid JSON file content: {exc}") from exc
    if not isinstance(data, list) or not data:
        raise InvalidBulkInputError(
            f"Invalid file content. An array of {noun} is required."
        )
    return data


def _recipient_reference(item: Any) -> Any:
    """The RecipientId of a raw package item, under any accepted name."""
    if not isinstance(item, dict):
        return None
    try:
        return PackageFields.model_validate(item).recipient_id
    except ValidationError:
        # Another field is malformed; validation reports it later.
        return next(
            (
                item[name]
                for name in ("RecipientId", "recipient_id")
                if name in item
            ),
            None,
        )


class BulkCoordinator:
    """Batch operations for packages and recipients."""

    def __init__(
        self, packages: PackageService, recipients: RecipientService
    ) -> None:
        self.packages = packages
        self.recipients = recipients

    async def add_packages(self, items: Any) -> list[Package]:
        items = ensure_items(items, "packages")

        for index, item in enumerate(items, start=1):
            recipient_id = _recipient_reference(item)
            try:
                await self.packages.resolve_recipient(recipient_id)
            except RecipientNotFoundError as exc:
                raise RecipientNotFoundError(
                    recipient_id, f"Recipient not found for Package {index}"
                ) from exc

        prepared = []
        for index, item in enumerate(items, start=1):
            try:
                fields = parse_fields(PackageFields, item)
                prepared.append(self.packages.prepare_new(fields))
            except ValidationFailedError as exc:
                logger.error(
                    "Package %d rejected, batch aborted: %s", index, exc
                )
                raise BatchInsertError(f"Package {index}: {exc}") from exc

        repository = self.packages.repository

        async def insert(numbers: list[int]) -> list[Package]:
            return await repository.create_many(
                [
                    {**data, "tracking_number": number}
                    for data, number in zip(prepared, numbers, strict=True)
                ]
            )

        created = await allocate_and_insert(
            repository,
            len(prepared),
            insert,
            attempts=self.packages.config.allocation_attempts,
        )
        logger.info(
            "Added %d packages (%s..%s)",
            len(created),
            created[0].tracking_number,
            created[-1].tracking_number,
        )
        return created

    async def add_recipients(self, items: Any) -> list[Recipient]:
        items = ensure_items(items, "recipients")

        prepared = []
        seen: set[int] = set()
        for index, item in enumerate(items, start=1):
            try:
                fields = parse_fields(RecipientFields, item)
                data = self.recipients.prepare_new(fields)
            except ValidationFailedError as exc:
                logger.error(
                    "Recipient %d rejected, batch aborted: %s", index, exc
                )
                raise BatchInsertError(f"Recipient {index}: {exc}") from exc
            contact = data["recipient_contact"]
            if contact in seen:
                raise BatchInsertError(
                    f"Recipient {index}: duplicate RecipientContact {contact}"
                )
            seen.add(contact)
            prepared.append(data)

        try:
            created = await self.recipients.repository.create_many(prepared)
        except DuplicateKeyError as exc:
            logger.error("Recipient batch rejected by storage: %s", exc)
            raise BatchInsertError(str(exc)) from exc
        logger.info("Added %d recipients", len(created))
        return created

    async def import_packages(self, raw: bytes | None) -> list[Package]:
        max_size = self.packages.config.max_import_size
        return await self.add_packages(parse_import(raw, "packages", max_size))

    async def import_recipients(self, raw: bytes | None) -> list[Recipient]:
        max_size = self.recipients.config.max_import_size
        return await self.add_recipients(
            parse_import(raw, "recipients", max_size)
        )

    async def delete_packages(self, tracking_numbers: Any) -> DeleteManyResult:
        numbers = ensure_numeric_keys(tracking_numbers, "tracking numbers")
        return await self._delete_many(self.packages.repository, numbers)

    async def delete_recipients(self, contacts: Any) -> DeleteManyResult:
        numbers = ensure_numeric_keys(contacts, "contact numbers")
        return await self._delete_many(self.recipients.repository, numbers)

    async def _delete_many(
        self,
        repository: PackageRepository | RecipientRepository,
        numbers: list[int],
    ) -> DeleteManyResult:
        existing = set(await repository.find_existing(numbers))
        not_found = [number for number in numbers if number not in existing]
        deleted = 0
        if existing:
            deleted = await repository.delete_many(
                [number for number in numbers if number in existing]
            )
        logger.info(
            "Deleted %d of %d requested records; %d not found",
            deleted,
            len(numbers),
            len(not_found),
        )
        return DeleteManyResult(deleted_count=deleted, not_found=not_found)

    async def update_packages(
        self, updates: Any
    ) -> UpdateManyResult[Package]:
        items = self._parse_updates(
            updates,
            "TrackingNumber",
            "Each update must contain a valid TrackingNumber "
            "and fieldsToUpdate object.",
        )
        return await self._update_many(
            items,
            PackageFields,
            self.packages.update_fields,
            immutable=("TrackingNumber",),
        )

    async def update_recipients(
        self, updates: Any
    ) -> UpdateManyResult[Recipient]:
        items = self._parse_updates(
            updates,
            "RecipientContact",
            "Each update must contain a numeric RecipientContact "
            "and fieldsToUpdate object.",
        )
        return await self._update_many(
            items, RecipientFields, self.recipients.update_fields
        )

    @staticmethod
    def _parse_updates(
        updates: Any, key_name: str, message: str
    ) -> list[tuple[int, dict[str, Any]]]:
        """Check the shape of every item before anything is written."""
        items = ensure_items(updates, "updates")
        parsed = []
        for item in items:
            if not isinstance(item, dict):
                raise InvalidBulkInputError(message)
            key = as_key(item.get(key_name))
            fields = item.get("fieldsToUpdate")
            if key is None or not isinstance(fields, dict):
                raise InvalidBulkInputError(message)
            parsed.append((key, fields))
        return parsed

    async def _update_many(
        self,
        items: Sequence[tuple[int, dict[str, Any]]],
        model: type[PackageFields] | type[RecipientFields],
        update: Callable[[int, dict[str, Any]], Awaitable[T | None]],
        immutable: Sequence[str] = (),
    ) -> UpdateManyResult[T]:
        result: UpdateManyResult[T] = UpdateManyResult()
        applied: list[int] = []
        for index, (key, raw) in enumerate(items, start=1):
            try:
                for name in immutable:
                    if name in raw:
                        raise ValidationFailedError(
                            name,
                            f"{name} cannot be changed",
                            value=raw[name],
                        )
                record = await update(key, parse_fields(model, raw))
            except (ValidationFailedError, NotFoundError) as exc:
                logger.warning(
                    "Update %d (%s) rejected after %d applied: %s",
                    index,
                    key,
                    len(applied),
                    exc,
                )
                raise BulkItemError(index, exc, list(applied)) from exc
            if record is None:
                result.not_found.append(key)
            else:
                result.updated.append(record)
                applied.append(key)
        return result
