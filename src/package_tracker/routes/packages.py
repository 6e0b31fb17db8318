"""Package endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile

from package_tracker.attachments import Attachment
from package_tracker.bulk import BulkCoordinator
from package_tracker.config import TrackerConfig
from package_tracker.dependencies import (
    get_bulk_coordinator,
    get_config,
    get_package_service,
)
from package_tracker.routes import read_upload
from package_tracker.schemas import (
    AddPackagesRequest,
    AddPackagesResponse,
    DeleteManyResponse,
    DeletePackagesRequest,
    MessageResponse,
    PackageFields,
    PackageResponse,
    PackageStatusUpdate,
    UpdateManyRequest,
    UpdatePackagesResponse,
)
from package_tracker.services import PackageService

router = APIRouter(prefix="/packages", tags=["packages"])


@router.get("/health")
async def packages_health() -> dict[str, str]:
    """Healthcheck endpoint for package routes."""
    return {"status": "ok"}


@router.post("", response_model=PackageResponse, status_code=201)
async def create_package(
    body: PackageFields,
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    package = await service.create(body.to_fields())
    recipient = await service.recipient_repository.get_by_id(
        package.recipient_id
    )
    return PackageResponse.from_package(package, recipient)


@router.get("", response_model=list[PackageResponse])
async def list_packages(
    service: PackageService = Depends(get_package_service),
) -> list[PackageResponse]:
    return [
        PackageResponse.from_package(package, recipient)
        for package, recipient in await service.list_all()
    ]


@router.post("/add-many", response_model=AddPackagesResponse, status_code=201)
async def add_many_packages(
    body: AddPackagesRequest,
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
) -> AddPackagesResponse:
    created = await bulk.add_packages(body.packages)
    return AddPackagesResponse(
        message="Packages created successfully!",
        data=[PackageResponse.from_package(p) for p in created],
    )


@router.post("/import", response_model=AddPackagesResponse, status_code=201)
async def import_packages(
    file: UploadFile | None = File(default=None),
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
    config: TrackerConfig = Depends(get_config),
) -> AddPackagesResponse:
    """Bulk-add packages from an uploaded JSON array."""
    raw = await read_upload(file, config.max_import_size)
    created = await bulk.import_packages(raw)
    return AddPackagesResponse(
        message="Packages imported successfully!",
        data=[PackageResponse.from_package(p) for p in created],
    )


@router.post("/delete-many", response_model=DeleteManyResponse)
async def delete_many_packages(
    body: DeletePackagesRequest,
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
) -> DeleteManyResponse:
    result = await bulk.delete_packages(body.tracking_numbers)
    return DeleteManyResponse(
        message="Packages deleted successfully",
        deleted_count=result.deleted_count,
        not_found_numbers=result.not_found,
    )


@router.post("/update-many", response_model=UpdatePackagesResponse)
async def update_many_packages(
    body: UpdateManyRequest,
    bulk: BulkCoordinator = Depends(get_bulk_coordinator),
) -> UpdatePackagesResponse:
    result = await bulk.update_packages(body.updates)
    return UpdatePackagesResponse(
        message="Packages updated successfully",
        updated_count=len(result.updated),
        updated_packages=[
            PackageResponse.from_package(p) for p in result.updated
        ],
        not_found_numbers=result.not_found,
    )


@router.get("/{tracking_number}", response_model=PackageResponse)
async def get_package(
    tracking_number: int,
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    package, recipient = await service.get(tracking_number)
    return PackageResponse.from_package(package, recipient)


@router.put("/{tracking_number}", response_model=PackageResponse)
async def replace_package(
    tracking_number: int,
    body: PackageFields,
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    package = await service.replace(tracking_number, body.to_fields())
    return PackageResponse.from_package(package)


@router.patch("/{tracking_number}", response_model=PackageResponse)
async def patch_package_status(
    tracking_number: int,
    body: PackageStatusUpdate,
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    package = await service.patch_status(tracking_number, body.status)
    return PackageResponse.from_package(package)


@router.delete("/{tracking_number}", response_model=MessageResponse)
async def delete_package(
    tracking_number: int,
    service: PackageService = Depends(get_package_service),
) -> MessageResponse:
    await service.delete(tracking_number)
    return MessageResponse(message="Package deleted successfully!")


@router.post("/{tracking_number}/ID_Proof", response_model=PackageResponse)
async def upload_package_id_proof(
    tracking_number: int,
    file: UploadFile | None = File(default=None),
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    raw = await read_upload(file, service.policy.max_size)
    attachment = None
    if file is not None and raw is not None:
        attachment = Attachment.from_bytes(raw, file.content_type or "")
    package = await service.attach_id_proof(tracking_number, attachment)
    return PackageResponse.from_package(package)


@router.get("/{tracking_number}/ID_Proof")
async def get_package_id_proof(
    tracking_number: int,
    service: PackageService = Depends(get_package_service),
) -> Response:
    attachment = await service.fetch_id_proof(tracking_number)
    return Response(
        content=attachment.data, media_type=attachment.content_type
    )


@router.delete(
    "/{tracking_number}/delete_ID_Proof", response_model=PackageResponse
)
async def delete_package_id_proof(
    tracking_number: int,
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    package = await service.delete_id_proof(tracking_number)
    return PackageResponse.from_package(package)
