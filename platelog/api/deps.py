"""
FastAPI dependencies for dependency injection.

Provides database sessions, use case instances, and
authentication dependencies for route handlers.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from platelog.application.directory_service import DirectoryService
from platelog.application.report_service import ReportService
from platelog.application.scan_service import ScanService
from platelog.application.settings_service import SettingsService
from platelog.core.logging import get_logger
from platelog.core.security import User, check_rate_limit, verify_admin_token, verify_api_key
from platelog.infrastructure.db.session import get_session
from platelog.infrastructure.recognition.recognizer import PlateRecognizer, get_plate_recognizer

logger = get_logger(__name__)

# Type aliases for cleaner route signatures
Session = Annotated[AsyncSession, Depends(get_session)]
AdminUser = Annotated[User, Depends(verify_admin_token)]
ApiKeyAuth = Annotated[None, Depends(verify_api_key)]
RateLimited = Annotated[None, Depends(check_rate_limit)]
Recognizer = Annotated[PlateRecognizer, Depends(get_plate_recognizer)]


async def get_scan_service(session: Session, recognizer: Recognizer) -> ScanService:
    """
    Dependency to get the scan use case.

    Args:
        session: Database session.
        recognizer: Configured plate recognizer.

    Returns:
        ScanService: Configured use case instance.
    """
    return ScanService(session, recognizer=recognizer)


async def get_directory_service(session: Session) -> DirectoryService:
    return DirectoryService(session)


async def get_report_service(session: Session) -> ReportService:
    return ReportService(session)


async def get_settings_service(session: Session) -> SettingsService:
    return SettingsService(session)


# Type aliases for use case dependencies
ScanUseCase = Annotated[ScanService, Depends(get_scan_service)]
Directory = Annotated[DirectoryService, Depends(get_directory_service)]
Reports = Annotated[ReportService, Depends(get_report_service)]
AppSettingsSvc = Annotated[SettingsService, Depends(get_settings_service)]


async def read_image_upload(image: UploadFile) -> bytes:
    """
    Read an uploaded camera frame.

    Raises:
        HTTPException: 400 if the upload is not a non-empty image.
    """
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Please upload an image.",
        )

    try:
        image_bytes = await image.read()
    except OSError as e:
        logger.error("image_read_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to read image file",
        ) from e

    if len(image_bytes) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty image file",
        )

    return image_bytes
