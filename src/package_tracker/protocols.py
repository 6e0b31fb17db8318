"""Storage collaborator protocols."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


class Recipient(Protocol):
    id: str
    recipient_name: str
    recipient_email: str
    recipient_contact: int
    address: str
    id_proof_data: bytes | None
    id_proof_content_type: str | None
    id_proof_size: int | None


class Package(Protocol):
    id: str
    tracking_number: int
    status: str
    send_date: datetime
    sender_name: str
    recipient_id: str
    origin: str
    destination: str
    description: str | None
    package_weight: float
    price: float
    id_proof_data: bytes | None
    id_proof_content_type: str | None
    id_proof_size: int | None


@runtime_checkable
class PackageRepository(Protocol):
    """Package collection keyed by tracking number.

    ``create`` and ``create_many`` raise ``DuplicateKeyError`` when the
    unique constraint on ``tracking_number`` rejects a write;
    ``create_many`` inserts all items or none.
    """

    async def get_max_tracking_number(self) -> int | None: ...

    async def get_by_tracking_number(
        self, tracking_number: int
    ) -> Package | None: ...

    async def list_all(self) -> list[Package]: ...

    async def create(self, **fields: Any) -> Package: ...

    async def create_many(
        self, items: Sequence[dict[str, Any]]
    ) -> list[Package]: ...

    async def update(
        self, tracking_number: int, **fields: Any
    ) -> Package | None: ...

    async def delete(self, tracking_number: int) -> bool: ...

    async def find_existing(
        self, tracking_numbers: Sequence[int]
    ) -> list[int]: ...

    async def delete_many(self, tracking_numbers: Sequence[int]) -> int: ...


@runtime_checkable
class RecipientRepository(Protocol):
    """Recipient collection keyed by contact number.

    ``create``, ``create_many`` and ``update`` raise ``DuplicateKeyError``
    when the unique constraint on ``recipient_contact`` rejects a write.
    """

    async def get_by_id(self, recipient_id: str) -> Recipient | None: ...

    async def get_by_contact(self, contact: int) -> Recipient | None: ...

    async def list_all(self) -> list[Recipient]: ...

    async def create(self, **fields: Any) -> Recipient: ...

    async def create_many(
        self, items: Sequence[dict[str, Any]]
    ) -> list[Recipient]: ...

    async def update(self, contact: int, **fields: Any) -> Recipient | None: ...

    async def delete(self, contact: int) -> bool: ...

    async def find_existing(self, contacts: Sequence[int]) -> list[int]: ...

    async def delete_many(self, contacts: Sequence[int]) -> int: ...
