"""Recipient endpoints, addressed by contact number."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile

from package_tracker.attachments import Attachment
from package_tracker.bulk import BulkCoordinator
from package_tracker.config import TrackerConfig
from package_tracker.dependencies import (
    get_bulk_coordinator,
    get_config,
    get_recipient_service,
)
from package_tracker.routes import read_upload
from package_tracker.schemas import (
    AddRecipientsRequest,
    AddRecipientsResponse,
    DeleteManyResponse,
    DeleteRecipientsRequest,
    MessageResponse,
    RecipientFields,
    RecipientResponse,
    UpdateManyRequest,
    UpdateRecipientsResponse,
)
from package_tracker.services import RecipientService

router = APIRouter(prefix="/recipients", tags=["recipients"])


@router.get("/health")
async def recipients_health() -> dict[str, str]:
    """Healthcheck endpoint for recipient routes."""
    return {"status": "ok"}


@router.post("", response_model=RecipientResponse, status_code=201)
async def create_recipient(
    body: RecipientFields,
    service: RecipientService = Depends(get_recipient_service),
) -> RecipientResponse:
    recipient = await service.create(body.to_fields())
    return RecipientResponse.from_recipient(recipient)


@router.get("", response_model=list[RecipientResponse])
async def list_recipients(
    service: RecipientService = Depends(get_recipient_service),
) -> list[RecipientResponse]:
    return [
        RecipientResponse.from_recipient(recipient)
        for recipient in await service.list_all()
    ]


@router.post(
    "/add-many", response_model=AddRecipientsResponse, status_code=201
)
async def add_many_recipients(
    body: AddRecipientsRequest,
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
) -> AddRecipientsResponse:
    created = await bulk.add_recipients(body.recipients)
    return AddRecipientsResponse(
        message="Recipients created successfully!",
        data=[RecipientResponse.from_recipient(r) for r in created],
    )


@router.post("/import", response_model=AddRecipientsResponse, status_code=201)
async def import_recipients(
    file: UploadFile | None = File(default=None),
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
    config: TrackerConfig = Depends(get_config),
) -> AddRecipientsResponse:
    raw = await read_upload(file, config.max_import_size)
    created = await bulk.import_recipients(raw)
    return AddRecipientsResponse(
        message="Recipients imported successfully!",
        data=[RecipientResponse.from_recipient(r) for r in created],
    )


@router.post("/delete-many", response_model=DeleteManyResponse)
async def delete_many_recipients(
    body: DeleteRecipientsRequest,
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
) -> DeleteManyResponse:
    """Delete by contact number; unknown numbers are reported, not fatal."""
    result = await bulk.delete_recipients(body.contact_numbers)
    return DeleteManyResponse(
        message="Recipients deleted successfully",
        deleted_count=result.deleted_count,
        not_found_numbers=result.not_found,
    )


@router.post("/update-many", response_model=UpdateRecipientsResponse)
async def update_many_recipients(
    body: UpdateManyRequest,
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
) -> UpdateRecipientsResponse:
    result = await bulk.update_recipients(body.updates)
    return UpdateRecipientsResponse(
        message="Recipients updated successfully",
        updated_count=len(result.updated),
        updated_recipients=[
            RecipientResponse.from_recipient(r) for r in result.updated
        ],
        not_found_numbers=result.not_found,
    )


@router.get("/{recipient_contact}", response_model=RecipientResponse)
async def get_recipient(
    recipient_contact: int,
    service: RecipientService = Depends(get_recipient_service),
) -> RecipientResponse:
    recipient = await service.get(recipient_contact)
    return RecipientResponse.from_recipient(recipient)


@router.put("/{recipient_contact}", response_model=RecipientResponse)
async def replace_recipient(
    recipient_contact: int,
    body: RecipientFields,
    service: RecipientService = Depends(get_recipient_service),
) -> RecipientResponse:
    recipient = await service.replace(recipient_contact, body.to_fields())
    return RecipientResponse.from_recipient(recipient)


@router.patch("/{recipient_contact}", response_model=RecipientResponse)
async def patch_recipient(
    recipient_contact: int,
    body: RecipientFields,
    service: RecipientService = Depends(get_recipient_service),
) -> RecipientResponse:
    recipient = await service.patch(recipient_contact, body.to_fields())
    return RecipientResponse.from_recipient(recipient)


@router.delete("/{recipient_contact}", response_model=MessageResponse)
async def delete_recipient(
    recipient_contact: int,
    service: RecipientService = Depends(get_recipient_service),
) -> MessageResponse:
    await service.delete(recipient_contact)
    return MessageResponse(message="Recipient deleted successfully!")


@router.post(
    "/{recipient_contact}/ID_Proof", response_model=RecipientResponse
)
async def upload_recipient_id_proof(
    recipient_contact: int,
    file: UploadFile | None = File(default=None),
    service: RecipientService = Depends(get_recipient_service),
) -> RecipientResponse:
    raw = await read_upload(file, service.policy.max_size)
    attachment = None
    if file is not None and raw is not None:
        attachment = Attachment.from_bytes(raw, file.content_type or "")
    recipient = await service.attach_id_proof(recipient_contact, attachment)
    return RecipientResponse.from_recipient(recipient)


@router.get("/{recipient_contact}/ID_Proof")
async def get_recipient_id_proof(
    recipient_contact: int,
    service: RecipientService = Depends(get_recipient_service),
) -> Response:
    attachment = await service.fetch_id_proof(recipient_contact)
    return Response(
        content=attachment.data, media_type=attachment.content_type
    )


@router.delete(
    "/{recipient_contact}/delete_ID_Proof", response_model=RecipientResponse
)
async def delete_recipient_id_proof(
    recipient_contact: int,
    service: RecipientService = Depends(get_recipient_service),
) -> RecipientResponse:
    recipient = await service.delete_id_proof(recipient_contact)
    return RecipientResponse.from_recipient(recipient)
