"""Package operations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from package_tracker.allocator import allocate_and_insert
from package_tracker.attachments import (
    CLEARED_ATTACHMENT,
    ID_PROOF_POLICY,
    Attachment,
    AttachmentPolicy,
)
from package_tracker.config import TrackerConfig
from package_tracker.exceptions import (
    AttachmentNotFoundError,
    PackageNotFoundError,
    RecipientNotFoundError,
    ValidationFailedError,
)
from package_tracker.protocols import (
    Package,
    PackageRepository,
    Recipient,
    RecipientRepository,
)
from package_tracker.validation import (
    PACKAGE_REQUIRED,
    PACKAGE_RULES,
    PASSED,
    ValidationResult,
    ensure_valid,
)

logger = logging.getLogger(__name__)


class PackageService:
    """Validated package lifecycle on top of a package repository."""

    def __init__(
        self,
        repository: PackageRepository,
        recipient_repository: RecipientRepository,
        config: TrackerConfig | None = None,
        policy: AttachmentPolicy = ID_PROOF_POLICY,
    ) -> None:
        self.repository = repository
        self.recipient_repository = recipient_repository
        self.config = config or TrackerConfig()
        self.policy = policy

    async def _require(self, tracking_number: int) -> Package:
        package = await self.repository.get_by_tracking_number(tracking_number)
        if package is None:
            raise PackageNotFoundError(tracking_number)
        return package

    async def resolve_recipient(self, recipient_id: Any) -> Recipient:
        recipient = None
        if isinstance(recipient_id, str) and recipient_id:
            recipient = await self.recipient_repository.get_by_id(recipient_id)
        if recipient is None:
            raise RecipientNotFoundError(recipient_id, "Recipient not found")
        return recipient

    def prepare_new(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Validate a full package and fill in defaults.

        The result is ready to be stored once a tracking number is added.
        """
        data = dict(fields)
        data.pop("tracking_number", None)
        ensure_valid(PACKAGE_RULES, data, PACKAGE_REQUIRED)
        if data.get("send_date") is None:
            data["send_date"] = datetime.now(tz=UTC)
        data.setdefault("description", None)
        return data

    async def create(self, fields: Mapping[str, Any]) -> Package:
        data = self.prepare_new(fields)
        await self.resolve_recipient(data["recipient_id"])

        async def insert(numbers: list[int]) -> Package:
            return await self.repository.create(
                tracking_number=numbers[0], **data
            )

        package = await allocate_and_insert(
            self.repository,
            1,
            insert,
            attempts=self.config.allocation_attempts,
        )
        logger.info(
            "Created package %s for recipient %s",
            package.tracking_number,
            package.recipient_id,
        )
        return package

    async def list_all(self) -> list[tuple[Package, Recipient | None]]:
        """All packages, each paired with its recipient (None if orphaned)."""
        packages = await self.repository.list_all()
        recipients = {
            recipient.id: recipient
            for recipient in await self.recipient_repository.list_all()
        }
        return [(p, recipients.get(p.recipient_id)) for p in packages]

    async def get(
        self, tracking_number: int
    ) -> tuple[Package, Recipient | None]:
        package = await self._require(tracking_number)
        recipient = await self.recipient_repository.get_by_id(
            package.recipient_id
        )
        if recipient is None:
            logger.warning(
                "Package %s references missing recipient %s",
                tracking_number,
                package.recipient_id,
            )
        return package, recipient

    async def replace(
        self, tracking_number: int, fields: Mapping[str, Any]
    ) -> Package:
        """Overwrite every field except the tracking number.

        SendDate is kept unless supplied; the ID proof is left alone.
        """
        existing = await self._require(tracking_number)
        data = dict(fields)
        data.pop("tracking_number", None)
        ensure_valid(PACKAGE_RULES, data, PACKAGE_REQUIRED)
        if data["recipient_id"] != existing.recipient_id:
            await self.resolve_recipient(data["recipient_id"])
        if data.get("send_date") is None:
            data.pop("send_date", None)
        data.setdefault("description", None)

        updated = await self.repository.update(tracking_number, **data)
        if updated is None:
            raise PackageNotFoundError(tracking_number)
        logger.info("Replaced package %s", tracking_number)
        return updated

    async def patch_status(self, tracking_number: int, status: Any) -> Package:
        ensure_valid(PACKAGE_RULES, {"status": status}, ("status",))
        updated = await self.repository.update(tracking_number, status=status)
        if updated is None:
            raise PackageNotFoundError(tracking_number)
        logger.info("Package %s is now %s", tracking_number, status)
        return updated

    async def update_fields(
        self, tracking_number: int, fields: Mapping[str, Any]
    ) -> Package | None:
        """Validated partial update; None when no package has the number."""
        data = dict(fields)
        if "tracking_number" in data:
            raise ValidationFailedError(
                "TrackingNumber",
                "TrackingNumber cannot be changed",
                value=data["tracking_number"],
            )
        ensure_valid(PACKAGE_RULES, data)
        if "recipient_id" in data:
            await self.resolve_recipient(data["recipient_id"])
        if data.get("send_date", False) is None:
            data.pop("send_date")
        return await self.repository.update(tracking_number, **data)

    async def delete(self, tracking_number: int) -> None:
        if not await self.repository.delete(tracking_number):
            raise PackageNotFoundError(tracking_number)
        logger.info("Deleted package %s", tracking_number)

    async def attach_id_proof(
        self, tracking_number: int, attachment: Attachment | None
    ) -> Package:
        await self._require(tracking_number)
        self.policy.ensure(attachment)
        updated = await self.repository.update(
            tracking_number, **attachment.to_fields()
        )
        if updated is None:
            raise PackageNotFoundError(tracking_number)
        self.policy.ensure(Attachment.from_record(updated))
        logger.info(
            "Stored ID proof for package %s (%s, %d bytes)",
            tracking_number,
            attachment.content_type,
            attachment.size,
        )
        return updated

    async def fetch_id_proof(self, tracking_number: int) -> Attachment:
        package = await self.repository.get_by_tracking_number(tracking_number)
        if package is None:
            logger.info(
                "ID proof requested for unknown package %s", tracking_number
            )
            raise AttachmentNotFoundError(tracking_number)
        attachment = Attachment.from_record(package)
        if attachment is None:
            logger.info("Package %s has no ID proof", tracking_number)
            raise AttachmentNotFoundError(tracking_number)
        return attachment

    async def delete_id_proof(self, tracking_number: int) -> Package:
        updated = await self.repository.update(
            tracking_number, **CLEARED_ATTACHMENT
        )
        if updated is None:
            raise PackageNotFoundError(tracking_number)
        logger.info("Cleared ID proof for package %s", tracking_number)
        return updated

    async def validate_id_proof(self, tracking_number: int) -> ValidationResult:
        """Re-run the attachment policy on the stored ID proof."""
        package = await self._require(tracking_number)
        attachment = Attachment.from_record(package)
        if attachment is None:
            return PASSED
        return self.policy.check(attachment)
