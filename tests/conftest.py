"""Shared fixtures for package-tracker tests."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field, fields, replace
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from package_tracker.config import TrackerConfig
from package_tracker.exceptions import (
    DuplicateKeyError,
    register_exception_handlers,
)
from package_tracker.router import create_tracking_router
from package_tracker.services import PackageService, RecipientService


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class DemoRecipient:
    recipient_name: str
    recipient_email: str
    recipient_contact: int
    address: str
    id: str = field(default_factory=_new_id)
    id_proof_data: bytes | None = None
    id_proof_content_type: str | None = None
    id_proof_size: int | None = None


@dataclass
class DemoPackage:
    tracking_number: int
    status: str
    send_date: datetime
    sender_name: str
    recipient_id: str
    origin: str
    destination: str
    package_weight: float
    price: float
    description: str | None = None
    id: str = field(default_factory=_new_id)
    id_proof_data: bytes | None = None
    id_proof_content_type: str | None = None
    id_proof_size: int | None = None


def _apply(record, values: dict) -> None:
    names = {f.name for f in fields(record)}
    for name, value in values.items():
        if name in names:
            setattr(record, name, value)


class InMemoryPackageRepo:
    def __init__(self) -> None:
        self.items: dict[int, DemoPackage] = {}

    async def get_max_tracking_number(self) -> int | None:
        return max(self.items, default=None)

    async def get_by_tracking_number(
        self, tracking_number: int
    ) -> DemoPackage | None:
        return self.items.get(tracking_number)

    async def list_all(self) -> list[DemoPackage]:
        return [self.items[key] for key in sorted(self.items)]

    async def create(self, **kwargs) -> DemoPackage:
        return (await self.create_many([kwargs]))[0]

    async def create_many(self, items: Sequence[dict]) -> list[DemoPackage]:
        numbers = [item["tracking_number"] for item in items]
        if len(set(numbers)) != len(numbers) or any(
            number in self.items for number in numbers
        ):
            raise DuplicateKeyError("tracking_number")
        created = [DemoPackage(**item) for item in items]
        for package in created:
            self.items[package.tracking_number] = package
        return created

    async def update(
        self, tracking_number: int, **kwargs
    ) -> DemoPackage | None:
        package = self.items.get(tracking_number)
        if package is None:
            return None
        _apply(package, kwargs)
        return package

    async def delete(self, tracking_number: int) -> bool:
        return self.items.pop(tracking_number, None) is not None

    async def find_existing(self, tracking_numbers: Sequence[int]) -> list[int]:
        return [n for n in tracking_numbers if n in self.items]

    async def delete_many(self, tracking_numbers: Sequence[int]) -> int:
        return sum(
            self.items.pop(n, None) is not None for n in tracking_numbers
        )


class InMemoryRecipientRepo:
    def __init__(self) -> None:
        self.items: dict[int, DemoRecipient] = {}

    async def get_by_id(self, recipient_id: str) -> DemoRecipient | None:
        for recipient in self.items.values():
            if recipient.id == recipient_id:
                return recipient
        return None

    async def get_by_contact(self, contact: int) -> DemoRecipient | None:
        return self.items.get(contact)

    async def list_all(self) -> list[DemoRecipient]:
        return [self.items[key] for key in sorted(self.items)]

    async def create(self, **kwargs) -> DemoRecipient:
        return (await self.create_many([kwargs]))[0]

    async def create_many(self, items: Sequence[dict]) -> list[DemoRecipient]:
        contacts = [item["recipient_contact"] for item in items]
        if len(set(contacts)) != len(contacts) or any(
            contact in self.items for contact in contacts
        ):
            raise DuplicateKeyError("recipient_contact")
        created = [DemoRecipient(**item) for item in items]
        for recipient in created:
            self.items[recipient.recipient_contact] = recipient
        return created

    async def update(self, contact: int, **kwargs) -> DemoRecipient | None:
        recipient = self.items.get(contact)
        if recipient is None:
            return None
        new_contact = kwargs.get("recipient_contact", contact)
        if new_contact != contact and new_contact in self.items:
            raise DuplicateKeyError("recipient_contact")
        updated = replace(recipient)
        _apply(updated, kwargs)
        del self.items[contact]
        self.items[updated.recipient_contact] = updated
        return updated

    async def delete(self, contact: int) -> bool:
        return self.items.pop(contact, None) is not None

    async def find_existing(self, contacts: Sequence[int]) -> list[int]:
        return [c for c in contacts if c in self.items]

    async def delete_many(self, contacts: Sequence[int]) -> int:
        return sum(self.items.pop(c, None) is not None for c in contacts)


RECIPIENT_PAYLOAD = {
    "RecipientName": "Jane Doe",
    "RecipientEmail": "jane@example.com",
    "RecipientContact": 5551234567,
    "Address": "12 Long Street, Springfield",
}


def recipient_fields(**overrides) -> dict:
    data = {
        "recipient_name": "Jane Doe",
        "recipient_email": "jane@example.com",
        "recipient_contact": 5551234567,
        "address": "12 Long Street, Springfield",
    }
    data.update(overrides)
    return data


def package_payload(recipient_id: str, **overrides) -> dict:
    data = {
        "Status": "pending",
        "SenderName": "John Smith",
        "RecipientId": recipient_id,
        "Origin": "Boston",
        "Destination": "Chicago",
        "Description": "Books",
        "PackageWeight": 2.5,
        "Price": 50,
    }
    data.update(overrides)
    return data


def package_fields(recipient_id: str, **overrides) -> dict:
    data = {
        "status": "pending",
        "sender_name": "John Smith",
        "recipient_id": recipient_id,
        "origin": "Boston",
        "destination": "Chicago",
        "description": "Books",
        "package_weight": 2.5,
        "price": 50,
    }
    data.update(overrides)
    return data


@pytest.fixture()
def package_repo() -> InMemoryPackageRepo:
    return InMemoryPackageRepo()


@pytest.fixture()
def recipient_repo() -> InMemoryRecipientRepo:
    return InMemoryRecipientRepo()


@pytest.fixture()
def config() -> TrackerConfig:
    return TrackerConfig()


@pytest.fixture()
def package_service(package_repo, recipient_repo, config) -> PackageService:
    return PackageService(package_repo, recipient_repo, config=config)


@pytest.fixture()
def recipient_service(recipient_repo, config) -> RecipientService:
    return RecipientService(recipient_repo, config=config)


@pytest.fixture()
async def recipient(recipient_repo) -> DemoRecipient:
    return await recipient_repo.create(**recipient_fields())


@pytest.fixture()
def client(package_repo, recipient_repo, config):
    """TestClient over the tracking router, mounted at the root."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(
        create_tracking_router(
            package_repository=package_repo,
            recipient_repository=recipient_repo,
            config=config,
        )
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
async def async_engine():
    """Create an in-memory aiosqlite async engine."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from package_tracker.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def async_session_factory(async_engine):
    """Create an async session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
