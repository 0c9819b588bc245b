"""Plate recognition infrastructure package."""

from platelog.infrastructure.recognition.recognizer import (
    EasyOCRPlateRecognizer,
    FramePreprocessor,
    MockPlateRecognizer,
    PlateRecognizer,
    RecognitionError,
    VisionPlateRecognizer,
    get_plate_recognizer,
    parse_recognition,
)

__all__ = [
    "PlateRecognizer",
    "VisionPlateRecognizer",
    "EasyOCRPlateRecognizer",
    "MockPlateRecognizer",
    "FramePreprocessor",
    "RecognitionError",
    "get_plate_recognizer",
    "parse_recognition",
]
