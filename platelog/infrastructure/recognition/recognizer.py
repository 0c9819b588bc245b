"""
Plate recognizer implementations using strategy pattern.

A recognizer turns a captured frame into a ``PlateRecognition`` or None
when no plate can be read. The default engine asks a vision-capable
chat model to read Thai plates; a local EasyOCR engine and a mock engine
can be swapped in through settings.
"""

import base64
import json
import threading
from abc import ABC, abstractmethod
from functools import lru_cache

import cv2
import numpy as np
import openai

from platelog.core.config import get_settings
from platelog.core.logging import get_logger
from platelog.domain.models import UNSPECIFIED_PROVINCE, PlateRecognition
from platelog.domain.services import normalize_plate

logger = get_logger(__name__)


class RecognitionError(Exception):
    """Raised when the recognizer cannot be reached or the image is unusable."""

    pass


class FramePreprocessor:
    """
    Decodes uploaded frames and prepares them for the recognizer.

    Phone cameras capture at up to 4K; frames are shrunk to
    ``max_width`` and re-encoded as JPEG before upload.
    """

    def __init__(self, max_width: int = 1920, jpeg_quality: int = 80):
        """
        Initialize preprocessor.

        Args:
            max_width: Frames wider than this are downscaled.
            jpeg_quality: JPEG quality used for upload (0-100).
        """
        self.max_width = max_width
        self.jpeg_quality = jpeg_quality

    def decode(self, image_bytes: bytes) -> np.ndarray:
        """
        Decode JPEG/PNG bytes into a BGR image.

        Raises:
            RecognitionError: If the bytes are not a decodable image.
        """
        buffer = np.frombuffer(image_bytes, np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
        if image is None:
            raise RecognitionError("Uploaded file is not a readable image")
        return image

    def downscale(self, image: np.ndarray) -> np.ndarray:
        """Shrink to ``max_width`` keeping aspect ratio; smaller frames pass through."""
        height, width = image.shape[:2]
        if width <= self.max_width:
            return image

        scale = self.max_width / width
        return cv2.resize(
            image,
            (self.max_width, int(height * scale)),
            interpolation=cv2.INTER_AREA,
        )

    def to_jpeg(self, image: np.ndarray) -> bytes:
        """Encode a BGR image as JPEG bytes."""
        ok, buffer = cv2.imencode(
            ".jpg",
            self.downscale(image),
            [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality],
        )
        if not ok:
            raise RecognitionError("Failed to encode frame as JPEG")
        return buffer.tobytes()


class PlateRecognizer(ABC):
    """
    Abstract base class for plate recognizers.

    Implementations must provide the recognize method.
    """

    @abstractmethod
    def recognize(self, image: np.ndarray) -> PlateRecognition | None:
        """
        Read the license plate in a frame.

        Args:
            image: Decoded frame (BGR format).

        Returns:
            PlateRecognition: Plate and province, or None if no plate was read.

        Raises:
            RecognitionError: If the engine fails.
        """
        pass


PLATE_PROMPT = """
Analyze this image of a vehicle.
Identify the Thai license plate number and the province name.

Rules:
1. Return ONLY a JSON object. No markdown code blocks.
2. JSON keys: "plate" (string), "province" (string), "make" (string or null), "color" (string or null).
3. For "plate": Remove all spaces. Keep Thai characters and numbers (e.g. "1กข1234").
4. For "province": Return the full Thai province name if visible (e.g. "กรุงเทพมหานคร"). If not visible, use "ไม่ระบุ".
5. For "make" and "color": the vehicle brand and body color if you can tell, otherwise null.
6. If the image is too blurry or no plate is found, return {"plate": null}.

Example Output:
{"plate": "3กอ1234", "province": "เชียงใหม่", "make": "Toyota", "color": "white"}
"""


def _text_field(data: dict, key: str) -> str | None:
    """Stripped string value of ``key``, or None for blanks and non-strings."""
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def parse_recognition(text: str | None) -> PlateRecognition | None:
    """
    Parse the model's JSON answer.

    Missing, malformed or plate-less answers all mean "no plate detected".
    """
    if not text:
        return None

    cleaned = text.strip()
    if cleaned.startswith("```"):
        # Some models wrap JSON in a fenced block despite instructions
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("recognition_output_unparsable", output=text[:200])
        return None

    if not isinstance(data, dict):
        return None

    plate = _text_field(data, "plate")
    if plate is None or not normalize_plate(plate):
        return None

    return PlateRecognition(
        plate=plate,
        province=_text_field(data, "province") or UNSPECIFIED_PROVINCE,
        make=_text_field(data, "make"),
        color=_text_field(data, "color"),
    )


class VisionPlateRecognizer(PlateRecognizer):
    """
    Recognizer backed by an OpenAI vision chat model.

    Example:
        recognizer = VisionPlateRecognizer()
        result = recognizer.recognize(frame)
    """

    def __init__(
        self,
        client: openai.OpenAI | None = None,
        model: str | None = None,
        preprocessor: FramePreprocessor | None = None,
    ):
        """
        Initialize the recognizer.

        Args:
            client: Optional preconfigured OpenAI client. Created lazily
                from settings when omitted.
            model: Chat model name (defaults to ``openai_model`` setting).
            preprocessor: Optional custom frame preprocessor.
        """
        settings = get_settings()
        self._client = client
        self._lock = threading.Lock()
        self.model = model or settings.openai_model
        self.preprocessor = preprocessor or FramePreprocessor(
            max_width=settings.recognizer_max_width
        )

    def _get_client(self) -> openai.OpenAI:
        """Create the API client on first use."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    settings = get_settings()
                    try:
                        self._client = openai.OpenAI(
                            api_key=settings.openai_api_key,
                            timeout=settings.recognizer_timeout_seconds,
                        )
                    except openai.OpenAIError as e:
                        raise RecognitionError(f"Vision client unavailable: {e}") from e
        return self._client

    def recognize(self, image: np.ndarray) -> PlateRecognition | None:
        """Send the frame to the vision model and parse its answer."""
        jpeg = self.preprocessor.to_jpeg(image)
        encoded = base64.b64encode(jpeg).decode("utf-8")

        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": PLATE_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:image/jpeg;base64,{encoded}"},
                            },
                        ],
                    }
                ],
                response_format={"type": "json_object"},
                max_tokens=200,
                temperature=0,
            )
        except openai.OpenAIError as e:
            logger.error("vision_request_failed", error=str(e))
            raise RecognitionError(f"Plate recognition request failed: {e}") from e

        text = response.choices[0].message.content if response.choices else None
        result = parse_recognition(text)

        logger.debug(
            "vision_recognition_complete",
            model=self.model,
            plate=result.plate if result else None,
        )
        return result


class EasyOCRPlateRecognizer(PlateRecognizer):
    """
    Local recognizer using EasyOCR with Thai and English models.

    All text boxes are joined in reading order, so the province line
    usually ends up appended to the plate; plate matching tolerates that.
    The province is always reported as unspecified.
    """

    _reader = None
    _lock = threading.Lock()

    def __init__(
        self,
        languages: list[str] | None = None,
        gpu: bool = False,
        min_confidence: float = 0.2,
    ):
        self.languages = languages or ["th", "en"]
        self.gpu = gpu
        self.min_confidence = min_confidence

    def _get_reader(self):
        """Lazy-load the EasyOCR reader."""
        if EasyOCRPlateRecognizer._reader is None:
            with EasyOCRPlateRecognizer._lock:
                if EasyOCRPlateRecognizer._reader is None:
                    try:
                        import easyocr
                    except ImportError as e:
                        raise RecognitionError(
                            "EasyOCR not installed. Run: pip install 'platelog[ocr]'"
                        ) from e
                    EasyOCRPlateRecognizer._reader = easyocr.Reader(
                        self.languages,
                        gpu=self.gpu,
                    )
                    logger.info("easyocr_initialized", languages=self.languages)
        return EasyOCRPlateRecognizer._reader

    def recognize(self, image: np.ndarray) -> PlateRecognition | None:
        reader = self._get_reader()
        try:
            detections = reader.readtext(image)
        except Exception as e:
            logger.error("easyocr_failed", error=str(e))
            raise RecognitionError(f"OCR extraction failed: {e}") from e

        texts = [text for _, text, conf in detections if conf >= self.min_confidence]
        plate = "".join(texts).strip()

        logger.debug("easyocr_complete", num_boxes=len(detections), plate=plate)

        if not normalize_plate(plate):
            return None
        return PlateRecognition(plate=plate)


class MockPlateRecognizer(PlateRecognizer):
    """
    Mock recognizer for tests and demos.

    Returns a fixed result regardless of the image.
    """

    def __init__(self, result: PlateRecognition | None = None):
        self.result = result

    def recognize(self, image: np.ndarray) -> PlateRecognition | None:
        return self.result


@lru_cache
def get_plate_recognizer() -> PlateRecognizer:
    """
    Build the recognizer selected by the ``recognizer_backend`` setting.

    Returns:
        PlateRecognizer: Process-wide recognizer instance.
    """
    backend = get_settings().recognizer_backend

    if backend == "easyocr":
        return EasyOCRPlateRecognizer()
    if backend == "mock":
        logger.warning("mock_recognizer_enabled")
        return MockPlateRecognizer()
    return VisionPlateRecognizer()
