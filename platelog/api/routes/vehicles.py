"""
Vehicle registry API routes.
"""

from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Path, Query, UploadFile, status
from pydantic import BaseModel, Field

from platelog.api.deps import ApiKeyAuth, Directory, RateLimited, ScanUseCase, read_image_upload
from platelog.api.schemas import ScanLogEntry, VehicleSummary, VehicleWithOwnerResponse
from platelog.core.logging import get_logger
from platelog.domain.models import UNSPECIFIED_PROVINCE, Vehicle, VehicleType
from platelog.domain.services import normalize_plate
from platelog.infrastructure.db.repository import RecordNotFoundError
from platelog.infrastructure.recognition.recognizer import RecognitionError

logger = get_logger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


class VehicleListResponse(BaseModel):
    """Response for listing vehicles."""

    vehicles: list[VehicleWithOwnerResponse]
    count: int


class VehicleCreateRequest(BaseModel):
    """Request to register a vehicle."""

    employee_id: int = Field(..., ge=1, description="Owner surrogate key")
    license_plate: str = Field(..., min_length=1, max_length=50, examples=["1กข 1234"])
    type: VehicleType = VehicleType.CAR
    province: str = Field(default=UNSPECIFIED_PROVINCE, max_length=100)
    make: str = Field(default="", max_length=100)
    model: str = Field(default="", max_length=100)
    color: str = Field(default="", max_length=50)
    photo_url: str | None = Field(default=None, max_length=500)


class VehicleRecognitionResponse(BaseModel):
    """Fields read from a frame, used to prefill the vehicle form."""

    detected: bool
    license_plate: str | None = None
    province: str | None = None
    make: str | None = None
    color: str | None = None


class VehicleHistoryResponse(BaseModel):
    """Scan history of one vehicle."""

    vehicle_id: int
    scans: list[ScanLogEntry]
    count: int


@router.get(
    "",
    response_model=VehicleListResponse,
    summary="List vehicles",
    description="Registered vehicles with owners, newest first.",
)
async def list_vehicles(
    directory: Directory,
    _: ApiKeyAuth,
) -> VehicleListResponse:
    items = await directory.list_vehicles()
    return VehicleListResponse(
        vehicles=[VehicleWithOwnerResponse.from_domain(item) for item in items],
        count=len(items),
    )


@router.post(
    "",
    response_model=VehicleSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Register vehicle",
)
async def create_vehicle(
    request: VehicleCreateRequest,
    directory: Directory,
    _: ApiKeyAuth,
) -> VehicleSummary:
    """Register a vehicle. The plate is stored without spaces or dashes."""
    try:
        vehicle = await directory.register_vehicle(Vehicle(**request.model_dump()))
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return VehicleSummary.model_validate(vehicle)


@router.get(
    "/{vehicle_id}/history",
    response_model=VehicleHistoryResponse,
    summary="Vehicle scan history",
)
async def vehicle_history(
    vehicle_id: Annotated[int, Path(description="Vehicle ID")],
    directory: Directory,
    _: ApiKeyAuth,
    limit: int = Query(default=50, ge=1, le=200),
) -> VehicleHistoryResponse:
    """Recent entries of one vehicle, newest first."""
    try:
        logs = await directory.vehicle_history(vehicle_id, limit=limit)
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found",
        ) from e

    return VehicleHistoryResponse(
        vehicle_id=vehicle_id,
        scans=[ScanLogEntry.model_validate(log) for log in logs],
        count=len(logs),
    )


@router.post(
    "/recognize",
    response_model=VehicleRecognitionResponse,
    summary="Read vehicle details from a photo",
    description="Reads plate, province, make and color to prefill the registration form.",
)
async def recognize_vehicle(
    image: Annotated[UploadFile, File(description="Photo of the vehicle")],
    use_case: ScanUseCase,
    _: ApiKeyAuth,
    __: RateLimited,
) -> VehicleRecognitionResponse:
    image_bytes = await read_image_upload(image)

    try:
        recognition = await use_case.read_plate(image_bytes)
    except RecognitionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    if recognition is None:
        return VehicleRecognitionResponse(detected=False)

    return VehicleRecognitionResponse(
        detected=True,
        license_plate=normalize_plate(recognition.plate),
        province=recognition.province,
        make=recognition.make,
        color=recognition.color,
    )
