"""Tracker exceptions and their mapping to HTTP responses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """Base class for package-tracker errors."""

    status_code = 400
    code = "tracker_error"

    def extra(self) -> dict[str, Any]:
        return {}


class ValidationFailedError(TrackerError):
    """A field failed a format, range, enum or presence check."""

    code = "validation_error"

    def __init__(
        self, field: str, message: str, value: Any = None
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)

    def extra(self) -> dict[str, Any]:
        return {"field": self.field}


class AttachmentPolicyError(ValidationFailedError):
    """An attachment is empty, too large, or of a disallowed type."""

    code = "attachment_rejected"


class ContactInUseError(ValidationFailedError):
    """A recipient contact number already belongs to another recipient."""

    code = "contact_in_use"

    def __init__(self, contact: int) -> None:
        super().__init__(
            "RecipientContact",
            "The new contact number is already in use.",
            value=contact,
        )


class InvalidBulkInputError(TrackerError):
    """A bulk request body is empty or malformed."""

    code = "invalid_input"


class BulkItemError(TrackerError):
    """One item of an update-many batch was rejected.

    Items before ``index`` were already applied and stay applied. The
    response status follows ``cause``: 400 for a failed check, 404 for an
    unknown reference.
    """

    code = "bulk_item_invalid"

    def __init__(
        self,
        index: int,
        cause: ValidationFailedError | NotFoundError,
        applied: list[int],
    ) -> None:
        self.index = index
        self.cause = cause
        self.applied = applied
        self.status_code = cause.status_code
        super().__init__(f"Update {index} failed: {cause}")

    def extra(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "field": getattr(self.cause, "field", None),
            "applied": self.applied,
        }


class NotFoundError(TrackerError):
    """Base class for unknown keys and references."""

    status_code = 404
    code = "not_found"


class PackageNotFoundError(NotFoundError):
    code = "package_not_found"

    def __init__(self, tracking_number: int) -> None:
        self.tracking_number = tracking_number
        super().__init__(f"Package {tracking_number} not found")


class RecipientNotFoundError(NotFoundError):
    code = "recipient_not_found"

    def __init__(self, key: Any, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Recipient {key} not found")


class AttachmentNotFoundError(NotFoundError):
    code = "id_proof_not_found"

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"ID proof not found for {key}")


class PayloadTooLargeError(TrackerError):
    status_code = 413
    code = "payload_too_large"


class PersistenceError(TrackerError):
    """Storage-layer or otherwise unexpected failure."""

    status_code = 500
    code = "persistence_error"


class DuplicateKeyError(PersistenceError):
    """Raised by repositories when a unique constraint rejects a write."""

    code = "duplicate_key"

    def __init__(self, field: str, message: str = "") -> None:
        self.field = field
        super().__init__(message or f"Duplicate value for {field}")


class BatchInsertError(PersistenceError):
    code = "batch_insert_failed"


class AllocationError(PersistenceError):
    code = "allocation_failed"


class ImportParseError(PersistenceError):
    code = "import_parse_error"


def _error_response(exc: TrackerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "code": exc.code, **exc.extra()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register tracker exception handlers on a FastAPI app.

    Handler order (most specific first):
    1. RequestValidationError → 400
    2. NotFoundError → 404
    3. PersistenceError → 500
    4. TrackerError → status declared on the exception class
    """

    @app.exception_handler(RequestValidationError)
    async def _request_validation(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        return JSONResponse(
            status_code=400,
            content={
                "detail": f"{field}: {first.get('msg', 'invalid request')}",
                "code": "validation_error",
                "field": field,
            },
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(
        request: Request,
        exc: NotFoundError,
    ) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(PersistenceError)
    async def _persistence_error(
        request: Request,
        exc: PersistenceError,
    ) -> JSONResponse:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc
        )
        return _error_response(exc)

    @app.exception_handler(TrackerError)
    async def _tracker_error(
        request: Request,
        exc: TrackerError,
    ) -> JSONResponse:
        return _error_response(exc)
