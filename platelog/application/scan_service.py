"""
Scan use case.

Covers the gate workflow:
1. Read a plate from a captured frame (external recognizer)
2. Resolve the plate against registered vehicles
3. Record a confirmed entry, or a walk-in entry with no vehicle
"""

from dataclasses import dataclass
from datetime import datetime

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from platelog.core.logging import get_logger
from platelog.domain.models import (
    PlateRecognition,
    ScanLog,
    ScanType,
    VehicleWithOwner,
)
from platelog.domain.services import PlateMatcher, normalize_plate
from platelog.infrastructure.db.repository import (
    EmployeeRepository,
    RecordNotFoundError,
    ScanLogRepository,
    VehicleRepository,
)
from platelog.infrastructure.recognition.recognizer import (
    FramePreprocessor,
    PlateRecognizer,
    get_plate_recognizer,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlateLookupResult:
    """
    Outcome of resolving a plate against the vehicle registry.

    Attributes:
        query: Plate text as given.
        plate: Normalized plate text.
        match: Matching vehicle with owner, or None (not an error).
    """

    query: str
    plate: str
    match: VehicleWithOwner | None

    @property
    def matched(self) -> bool:
        return self.match is not None


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of a camera scan.

    ``recognition`` is None when no plate could be read, in which case
    ``lookup`` is None as well.
    """

    recognition: PlateRecognition | None
    lookup: PlateLookupResult | None


class ScanService:
    """
    Use case for scanning vehicles at the gate.

    Example:
        service = ScanService(session)
        result = await service.scan(image_bytes)
        if result.lookup and result.lookup.matched:
            await service.record_scan(result.lookup.match.vehicle.id)
    """

    def __init__(
        self,
        session: AsyncSession,
        recognizer: PlateRecognizer | None = None,
        preprocessor: FramePreprocessor | None = None,
    ):
        """
        Initialize scan service.

        Args:
            session: Database session for repository access.
            recognizer: Optional custom plate recognizer.
            preprocessor: Optional custom frame decoder.
        """
        self._employee_repo = EmployeeRepository(session)
        self._vehicle_repo = VehicleRepository(session)
        self._scan_log_repo = ScanLogRepository(session)
        self._recognizer = recognizer or get_plate_recognizer()
        self._preprocessor = preprocessor or FramePreprocessor()

    async def read_plate(self, image_bytes: bytes) -> PlateRecognition | None:
        """
        Read the plate in an uploaded frame.

        Decoding and the recognizer call run outside the event loop.

        Raises:
            RecognitionError: If the image is unreadable or the recognizer fails.
        """
        image = await run_in_threadpool(self._preprocessor.decode, image_bytes)
        recognition = await run_in_threadpool(self._recognizer.recognize, image)

        if recognition is None:
            logger.info("no_plate_detected", image_size=len(image_bytes))
        else:
            logger.info(
                "plate_recognized",
                plate=recognition.plate,
                province=recognition.province,
            )
        return recognition

    async def scan(self, image_bytes: bytes) -> ScanResult:
        """Read the plate in a frame and look it up."""
        recognition = await self.read_plate(image_bytes)
        if recognition is None:
            return ScanResult(recognition=None, lookup=None)

        lookup = await self.lookup(recognition.plate)
        return ScanResult(recognition=recognition, lookup=lookup)

    async def lookup(self, plate: str) -> PlateLookupResult:
        """
        Resolve a plate (recognized or typed) against registered vehicles.

        An empty plate is answered without querying the registry.
        """
        normalized = normalize_plate(plate)
        if not normalized:
            return PlateLookupResult(query=plate, plate=normalized, match=None)

        vehicles = await self._vehicle_repo.list_with_owner()
        match = PlateMatcher(vehicles).match(normalized)

        logger.info(
            "plate_lookup",
            plate=normalized,
            candidates=len(vehicles),
            matched_vehicle_id=match.vehicle.id if match else None,
        )
        return PlateLookupResult(query=plate, plate=normalized, match=match)

    async def record_scan(
        self,
        vehicle_id: int,
        timestamp: datetime | None = None,
        image_url: str | None = None,
    ) -> ScanLog:
        """
        Record a confirmed vehicle entry.

        The log's type is copied from the vehicle and the owner is
        denormalized onto the log.

        Raises:
            RecordNotFoundError: If the vehicle does not exist.
        """
        found = await self._vehicle_repo.get_by_id(vehicle_id)
        if found is None:
            raise RecordNotFoundError(f"Vehicle {vehicle_id} not found")

        log = ScanLog(
            vehicle_id=found.vehicle.id,
            employee_id=found.vehicle.employee_id,
            timestamp=timestamp or datetime.utcnow(),
            image_url=image_url,
            vehicle_type=found.vehicle.type.value,
        )
        saved = await self._scan_log_repo.create(log)
        saved.employee = found.employee

        logger.info(
            "scan_recorded",
            scan_log_id=saved.id,
            vehicle_id=vehicle_id,
            employee_id=saved.employee_id,
            vehicle_type=saved.vehicle_type,
        )
        return saved

    async def record_walk_in(
        self,
        employee_pk: int,
        timestamp: datetime | None = None,
    ) -> ScanLog:
        """
        Record a walk-in ("win") entry with no vehicle.

        Raises:
            RecordNotFoundError: If the employee does not exist.
        """
        employee = await self._employee_repo.get_by_id(employee_pk)
        if employee is None:
            raise RecordNotFoundError(f"Employee {employee_pk} not found")

        log = ScanLog(
            vehicle_id=None,
            employee_id=employee_pk,
            timestamp=timestamp or datetime.utcnow(),
            vehicle_type=ScanType.WIN.value,
        )
        saved = await self._scan_log_repo.create(log)
        saved.employee = employee

        logger.info("walk_in_recorded", scan_log_id=saved.id, employee_id=employee_pk)
        return saved
