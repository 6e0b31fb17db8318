"""Recipient operations, keyed by contact number."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from package_tracker.attachments import (
    CLEARED_ATTACHMENT,
    IMAGE_POLICY,
    Attachment,
    AttachmentPolicy,
)
from package_tracker.config import TrackerConfig
from package_tracker.exceptions import (
    AttachmentNotFoundError,
    ContactInUseError,
    DuplicateKeyError,
    RecipientNotFoundError,
)
from package_tracker.protocols import Recipient, RecipientRepository
from package_tracker.validation import (
    PASSED,
    RECIPIENT_REQUIRED,
    RECIPIENT_RULES,
    ValidationResult,
    ensure_valid,
)

logger = logging.getLogger(__name__)

REPLACE_REQUIRED = ("recipient_name", "recipient_email", "address")


class RecipientService:
    """Validated recipient lifecycle on top of a recipient repository."""

    def __init__(
        self,
        repository: RecipientRepository,
        config: TrackerConfig | None = None,
        policy: AttachmentPolicy = IMAGE_POLICY,
    ) -> None:
        self.repository = repository
        self.config = config or TrackerConfig()
        self.policy = policy

    async def _require(self, contact: int) -> Recipient:
        recipient = await self.repository.get_by_contact(contact)
        if recipient is None:
            raise RecipientNotFoundError(
                contact, "Recipient not found with the given contact number"
            )
        return recipient

    async def _ensure_contact_free(
        self, new_contact: int, current: int | None
    ) -> None:
        if new_contact == current:
            return
        if await self.repository.get_by_contact(new_contact) is not None:
            raise ContactInUseError(new_contact)

    def prepare_new(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        data = dict(fields)
        ensure_valid(RECIPIENT_RULES, data, RECIPIENT_REQUIRED)
        return data

    async def create(self, fields: Mapping[str, Any]) -> Recipient:
        data = self.prepare_new(fields)
        await self._ensure_contact_free(data["recipient_contact"], None)
        try:
            recipient = await self.repository.create(**data)
        except DuplicateKeyError as exc:
            raise ContactInUseError(data["recipient_contact"]) from exc
        logger.info("Created recipient %s", recipient.recipient_contact)
        return recipient

    async def list_all(self) -> list[Recipient]:
        return await self.repository.list_all()

    async def get(self, contact: int) -> Recipient:
        return await self._require(contact)

    async def replace(
        self, contact: int, fields: Mapping[str, Any]
    ) -> Recipient:
        """Overwrite name, email and address.

        The contact number is the key; it only changes when a different,
        unused number is supplied.
        """
        await self._require(contact)
        data = dict(fields)
        if data.get("recipient_contact") in (None, contact):
            data.pop("recipient_contact", None)
        ensure_valid(RECIPIENT_RULES, data, REPLACE_REQUIRED)
        updated = await self._apply(contact, data)
        if updated is None:
            raise RecipientNotFoundError(
                contact, "Recipient not found with the given contact number"
            )
        logger.info("Replaced recipient %s", contact)
        return updated

    async def patch(self, contact: int, fields: Mapping[str, Any]) -> Recipient:
        """Update only the supplied fields."""
        updated = await self.update_fields(contact, fields)
        if updated is None:
            raise RecipientNotFoundError(
                contact, "Recipient not found with the given contact number"
            )
        logger.info("Updated recipient %s", contact)
        return updated

    async def update_fields(
        self, contact: int, fields: Mapping[str, Any]
    ) -> Recipient | None:
        """Validated partial update; None when no recipient has the contact."""
        data = dict(fields)
        ensure_valid(RECIPIENT_RULES, data)
        return await self._apply(contact, data)

    async def _apply(
        self, contact: int, data: dict[str, Any]
    ) -> Recipient | None:
        if "recipient_contact" in data:
            await self._ensure_contact_free(data["recipient_contact"], contact)
        try:
            return await self.repository.update(contact, **data)
        except DuplicateKeyError as exc:
            raise ContactInUseError(data.get("recipient_contact")) from exc

    async def delete(self, contact: int) -> None:
        if not await self.repository.delete(contact):
            raise RecipientNotFoundError(contact, "Recipient not found.")
        logger.info("Deleted recipient %s", contact)

    async def attach_id_proof(
        self, contact: int, attachment: Attachment | None
    ) -> Recipient:
        await self._require(contact)
        self.policy.ensure(attachment)
        updated = await self.repository.update(
            contact, **attachment.to_fields()
        )
        if updated is None:
            raise RecipientNotFoundError(contact, "Recipient not found.")
        self.policy.ensure(Attachment.from_record(updated))
        logger.info(
            "Stored ID proof for recipient %s (%s, %d bytes)",
            contact,
            attachment.content_type,
            attachment.size,
        )
        return updated

    async def fetch_id_proof(self, contact: int) -> Attachment:
        recipient = await self.repository.get_by_contact(contact)
        if recipient is None:
            logger.info("ID proof requested for unknown recipient %s", contact)
            raise AttachmentNotFoundError(contact)
        attachment = Attachment.from_record(recipient)
        if attachment is None:
            logger.info("Recipient %s has no ID proof", contact)
            raise AttachmentNotFoundError(contact)
        return attachment

    async def delete_id_proof(self, contact: int) -> Recipient:
        updated = await self.repository.update(contact, **CLEARED_ATTACHMENT)
        if updated is None:
            raise RecipientNotFoundError(contact, "Recipient not found.")
        logger.info("Cleared ID proof for recipient %s", contact)
        return updated

    async def validate_id_proof(self, contact: int) -> ValidationResult:
        """Re-run the attachment policy on the stored ID proof."""
        attachment = Attachment.from_record(await self._require(contact))
        if attachment is None:
            return PASSED
        return self.policy.check(attachment)
