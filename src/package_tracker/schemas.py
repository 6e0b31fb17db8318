"""Pydantic request and response models.

Models use the client-facing field names (``TrackingNumber``,
``SenderName``...) as aliases over snake_case attributes, which are the
keys services and repositories work with.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from package_tracker.attachments import Attachment
from package_tracker.exceptions import ValidationFailedError
from package_tracker.formatting import format_price, format_weight
from package_tracker.protocols import Package, Recipient


class PackageFields(BaseModel):
    """Writable package fields; all optional, services enforce presence."""

    model_config = ConfigDict(populate_by_name=True)

    status: str | None = Field(default=None, alias="Status")
    send_date: datetime | None = Field(
        default=None,
        alias="SendDate",
        validation_alias=AliasChoices("SendDate", "Send_Date", "send_date"),
    )
    sender_name: str | None = Field(default=None, alias="SenderName")
    recipient_id: str | None = Field(default=None, alias="RecipientId")
    origin: str | None = Field(default=None, alias="Origin")
    destination: str | None = Field(default=None, alias="Destination")
    description: str | None = Field(default=None, alias="Description")
    package_weight: float | None = Field(
        default=None,
        alias="PackageWeight",
        validation_alias=AliasChoices(
            "PackageWeight", "Package_weight", "package_weight"
        ),
    )
    price: float | None = Field(default=None, alias="Price")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PackageStatusUpdate(BaseModel):
    status: str | None = Field(default=None, alias="Status")


class RecipientFields(BaseModel):
    """Writable recipient fields; all optional, services enforce presence."""

    model_config = ConfigDict(populate_by_name=True)

    recipient_name: str | None = Field(default=None, alias="RecipientName")
    recipient_email: str | None = Field(default=None, alias="RecipientEmail")
    recipient_contact: int | None = Field(
        default=None, alias="RecipientContact"
    )
    address: str | None = Field(default=None, alias="Address")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def parse_fields(
    model: type[PackageFields] | type[RecipientFields],
    raw: Any,
) -> dict[str, Any]:
    """Parse one raw bulk item, reporting type errors as validation errors."""
    if not isinstance(raw, dict):
        raise ValidationFailedError("item", f"{raw!r} is not an object")
    try:
        return model.model_validate(raw).to_fields()
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationFailedError(
            field, f"{field}: {first['msg']}", value=first.get("input")
        ) from exc


class AddPackagesRequest(BaseModel):
    packages: list[Any] | None = None


class AddRecipientsRequest(BaseModel):
    recipients: list[Any] | None = None


class DeletePackagesRequest(BaseModel):
    tracking_numbers: list[Any] | None = Field(
        default=None, alias="trackingNumbers"
    )


class DeleteRecipientsRequest(BaseModel):
    contact_numbers: list[Any] | None = Field(
        default=None, alias="contactNumbers"
    )


class UpdateManyRequest(BaseModel):
    updates: list[Any] | None = None


class AttachmentInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_type: str = Field(alias="contentType")
    size: int

    @classmethod
    def from_record(cls, record: Any) -> AttachmentInfo | None:
        attachment = Attachment.from_record(record)
        if attachment is None:
            return None
        return cls(content_type=attachment.content_type, size=attachment.size)


class RecipientResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="Id")
    recipient_name: str = Field(alias="RecipientName")
    recipient_email: str = Field(alias="RecipientEmail")
    recipient_contact: int = Field(alias="RecipientContact")
    address: str = Field(alias="Address")
    id_proof: AttachmentInfo | None = Field(default=None, alias="IDProof")

    @classmethod
    def from_recipient(cls, recipient: Recipient) -> RecipientResponse:
        return cls(
            id=recipient.id,
            recipient_name=recipient.recipient_name,
            recipient_email=recipient.recipient_email,
            recipient_contact=recipient.recipient_contact,
            address=recipient.address,
            id_proof=AttachmentInfo.from_record(recipient),
        )


class PackageResponse(BaseModel):
    """Package as shown to clients; weight and price are display strings."""

    model_config = ConfigDict(populate_by_name=True)

    tracking_number: int = Field(alias="TrackingNumber")
    status: str = Field(alias="Status")
    send_date: datetime = Field(alias="SendDate")
    sender_name: str = Field(alias="SenderName")
    recipient_id: str = Field(alias="RecipientId")
    origin: str = Field(alias="Origin")
    destination: str = Field(alias="Destination")
    description: str | None = Field(default=None, alias="Description")
    package_weight: str = Field(alias="PackageWeight")
    price: str = Field(alias="Price")
    id_proof: AttachmentInfo | None = Field(default=None, alias="IDProof")
    recipient: RecipientResponse | None = Field(
        default=None, alias="Recipient"
    )

    @classmethod
    def from_package(
        cls,
        package: Package,
        recipient: Recipient | None = None,
    ) -> PackageResponse:
        return cls(
            tracking_number=package.tracking_number,
            status=package.status,
            send_date=package.send_date,
            sender_name=package.sender_name,
            recipient_id=package.recipient_id,
            origin=package.origin,
            destination=package.destination,
            description=package.description,
            package_weight=format_weight(package.package_weight),
            price=format_price(package.price),
            id_proof=AttachmentInfo.from_record(package),
            recipient=(
                RecipientResponse.from_recipient(recipient)
                if recipient is not None
                else None
            ),
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class AddPackagesResponse(MessageResponse):
    data: list[PackageResponse]


class AddRecipientsResponse(MessageResponse):
    data: list[RecipientResponse]


class DeleteManyResponse(MessageResponse):
    model_config = ConfigDict(populate_by_name=True)

    deleted_count: int = Field(alias="deletedCount")
    not_found_numbers: list[int] = Field(alias="notFoundNumbers")


class UpdatePackagesResponse(MessageResponse):
    model_config = ConfigDict(populate_by_name=True)

    updated_count: int = Field(alias="updatedCount")
    updated_packages: list[PackageResponse] = Field(alias="updatedPackages")
    not_found_numbers: list[int] = Field(alias="notFoundNumbers")


class UpdateRecipientsResponse(MessageResponse):
    model_config = ConfigDict(populate_by_name=True)

    updated_count: int = Field(alias="updatedCount")
    updated_recipients: list[RecipientResponse] = Field(
        alias="updatedRecipients"
    )
    not_found_numbers: list[int] = Field(alias="notFoundNumbers")
