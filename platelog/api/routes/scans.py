"""
Scan API routes.

Provides endpoints for reading plates from camera frames,
looking plates up in the vehicle registry and recording entries.
"""

from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, Field

from platelog.api.deps import ApiKeyAuth, RateLimited, ScanUseCase, read_image_upload
from platelog.api.schemas import EmployeeSummary, ScanLogEntry, VehicleSummary
from platelog.application.scan_service import PlateLookupResult
from platelog.core.logging import get_logger
from platelog.infrastructure.db.repository import RecordNotFoundError
from platelog.infrastructure.recognition.recognizer import RecognitionError

logger = get_logger(__name__)

router = APIRouter(prefix="/scans", tags=["scans"])


class PlateMatchResponse(BaseModel):
    """Result of reading and/or looking up a plate."""

    plate: str | None = Field(
        description="Normalized plate, None if no plate was read",
        examples=["1กข1234"],
    )
    province: str | None = Field(
        default=None,
        description="Province reported by the recognizer",
        examples=["กรุงเทพมหานคร"],
    )
    matched: bool = Field(description="Whether a registered vehicle matched")
    vehicle: VehicleSummary | None = None
    employee: EmployeeSummary | None = None
    message: str = Field(examples=["Matched 1กข1234"])

    @classmethod
    def from_lookup(
        cls,
        lookup: PlateLookupResult,
        province: str | None = None,
    ) -> "PlateMatchResponse":
        if not lookup.matched:
            return cls(
                plate=lookup.plate,
                province=province,
                matched=False,
                message=f"Plate {lookup.plate!r} is not registered",
            )

        match = lookup.match
        return cls(
            plate=lookup.plate,
            province=province,
            matched=True,
            vehicle=VehicleSummary.model_validate(match.vehicle),
            employee=EmployeeSummary.model_validate(match.employee) if match.employee else None,
            message=f"Matched {match.vehicle.license_plate}",
        )


class ScanCreateRequest(BaseModel):
    """Request to record a confirmed vehicle entry."""

    vehicle_id: int = Field(..., ge=1)
    image_url: str | None = Field(default=None, max_length=500)


class WalkInCreateRequest(BaseModel):
    """Request to record a walk-in entry."""

    employee_id: int = Field(..., ge=1, description="Employee surrogate key")


@router.post(
    "/recognize",
    response_model=PlateMatchResponse,
    summary="Recognize and match a plate",
    description="Upload a camera frame; the plate is read and matched against registered vehicles.",
    responses={
        400: {"description": "Invalid image or request"},
        401: {"description": "Invalid API key"},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "Plate recognizer unavailable"},
    },
)
async def recognize_plate(
    image: Annotated[UploadFile, File(description="Camera frame containing a plate")],
    use_case: ScanUseCase,
    _: ApiKeyAuth,
    __: RateLimited,
) -> PlateMatchResponse:
    """
    Read a plate from a camera frame and look it up.

    **Authentication**: Requires X-API-Key header.

    An unmatched plate is not an error: the response carries
    ``matched: false`` and the operator can fall back to manual entry.
    """
    image_bytes = await read_image_upload(image)

    try:
        result = await use_case.scan(image_bytes)
    except RecognitionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    if result.recognition is None:
        return PlateMatchResponse(
            plate=None,
            matched=False,
            message="No plate detected",
        )

    return PlateMatchResponse.from_lookup(
        result.lookup,
        province=result.recognition.province,
    )


@router.get(
    "/lookup",
    response_model=PlateMatchResponse,
    summary="Look up a plate",
    description="Manual plate search using the same matching rules as camera scans.",
)
async def lookup_plate(
    use_case: ScanUseCase,
    _: ApiKeyAuth,
    plate: Annotated[str, Query(max_length=50, description="Plate as typed")] = "",
) -> PlateMatchResponse:
    lookup = await use_case.lookup(plate)
    return PlateMatchResponse.from_lookup(lookup)


@router.post(
    "",
    response_model=ScanLogEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Record a vehicle entry",
)
async def record_scan(
    request: ScanCreateRequest,
    use_case: ScanUseCase,
    _: ApiKeyAuth,
    __: RateLimited,
) -> ScanLogEntry:
    """Record a confirmed entry for a matched vehicle."""
    try:
        log = await use_case.record_scan(request.vehicle_id, image_url=request.image_url)
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e

    return ScanLogEntry.model_validate(log)


@router.post(
    "/walk-in",
    response_model=ScanLogEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Record a walk-in entry",
)
async def record_walk_in(
    request: WalkInCreateRequest,
    use_case: ScanUseCase,
    _: ApiKeyAuth,
    __: RateLimited,
) -> ScanLogEntry:
    """Record an entry for an employee who arrived without a registered vehicle."""
    try:
        log = await use_case.record_walk_in(request.employee_id)
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e

    return ScanLogEntry.model_validate(log)
