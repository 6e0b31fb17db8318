"""Size and content-type policy for ID proof attachments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from package_tracker.exceptions import AttachmentPolicyError
from package_tracker.validation import PASSED, ValidationResult

MAX_ATTACHMENT_SIZE = 5 * 1024 * 1024

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}


@dataclass(frozen=True)
class Attachment:
    data: bytes
    content_type: str
    size: int

    @classmethod
    def from_bytes(cls, data: bytes, content_type: str) -> Attachment:
        return cls(data=data, content_type=content_type, size=len(data))

    @classmethod
    def from_record(cls, record: Any) -> Attachment | None:
        """Read the ``id_proof_*`` columns of a stored record."""
        data = getattr(record, "id_proof_data", None)
        if not data:
            return None
        return cls(
            data=data,
            content_type=record.id_proof_content_type or "",
            size=record.id_proof_size or len(data),
        )

    def to_fields(self) -> dict[str, Any]:
        return {
            "id_proof_data": self.data,
            "id_proof_content_type": self.content_type,
            "id_proof_size": self.size,
        }


CLEARED_ATTACHMENT: dict[str, Any] = {
    "id_proof_data": None,
    "id_proof_content_type": None,
    "id_proof_size": None,
}


@dataclass(frozen=True)
class AttachmentPolicy:
    allowed_types: frozenset[str]
    type_message: str
    max_size: int = MAX_ATTACHMENT_SIZE

    @property
    def size_message(self) -> str:
        megabytes = self.max_size // (1024 * 1024)
        return f"File size must be less than {megabytes} MB."

    def _failure(
        self, attachment: Attachment | None
    ) -> tuple[str, str] | None:
        if attachment is None:
            return "data", "ID proof file is required."
        if not attachment.data:
            return "data", "Attachment data must not be empty."
        size = max(attachment.size, len(attachment.data))
        if size > self.max_size:
            return "size", self.size_message
        if attachment.content_type not in self.allowed_types:
            return "contentType", self.type_message
        return None

    def check(self, attachment: Attachment | None) -> ValidationResult:
        failure = self._failure(attachment)
        if failure is None:
            return PASSED
        return ValidationResult(False, failure[1])

    def ensure(self, attachment: Attachment | None) -> None:
        failure = self._failure(attachment)
        if failure is not None:
            field, message = failure
            value = None
            if field == "size":
                value = attachment.size
            elif field == "contentType":
                value = attachment.content_type
            raise AttachmentPolicyError(
                f"IDProof.{field}", message, value=value
            )


ID_PROOF_POLICY = AttachmentPolicy(
    allowed_types=DOCUMENT_TYPES,
    type_message="Only JPEG, PNG, GIF, WebP, and PDF formats are allowed.",
)

IMAGE_POLICY = AttachmentPolicy(
    allowed_types=IMAGE_TYPES,
    type_message="Only JPEG, PNG, GIF, and WebP image formats are allowed.",
)
