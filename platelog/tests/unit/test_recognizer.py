"""
Unit tests for plate recognizers and frame preprocessing.

The vision client and EasyOCR reader are mocked; no network or model
download is needed.
"""

from unittest.mock import MagicMock

import numpy as np
import openai
import pytest

from platelog.domain.models import UNSPECIFIED_PROVINCE, PlateRecognition
from platelog.infrastructure.recognition.recognizer import (
    EasyOCRPlateRecognizer,
    FramePreprocessor,
    MockPlateRecognizer,
    RecognitionError,
    VisionPlateRecognizer,
    get_plate_recognizer,
    parse_recognition,
)


def chat_response(content: str | None) -> MagicMock:
    """Shape of an OpenAI chat completion with one choice."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestParseRecognition:
    """Tests for parsing the model's JSON answer."""

    def test_full_answer(self):
        result = parse_recognition(
            '{"plate": "3กอ1234", "province": "เชียงใหม่", "make": "Toyota", "color": "white"}'
        )
        assert result == PlateRecognition(
            plate="3กอ1234", province="เชียงใหม่", make="Toyota", color="white"
        )

    def test_missing_province_defaults(self):
        result = parse_recognition('{"plate": "1กข1234"}')
        assert result.province == UNSPECIFIED_PROVINCE
        assert result.make is None

    def test_fenced_json(self):
        result = parse_recognition('```json\n{"plate": "1กข1234", "province": "ไม่ระบุ"}\n```')
        assert result.plate == "1กข1234"

    @pytest.mark.parametrize(
        "text",
        [None, "", '{"plate": null}', '{"plate": ""}', "not json", "[1, 2]"],
    )
    def test_no_plate(self, text):
        assert parse_recognition(text) is None

    @pytest.mark.parametrize(
        "text",
        ['{"plate": "  "}', '{"plate": "-"}', '{"plate": " - -\u00a0"}', '{"plate": 1234}'],
    )
    def test_blank_or_non_text_plate_is_no_detection(self, text):
        assert parse_recognition(text) is None

    def test_non_string_details_dropped(self):
        result = parse_recognition(
            '{"plate": " 1กข1234 ", "province": 10, "make": 123, "color": ["white"]}'
        )

        assert result == PlateRecognition(
            plate="1กข1234", province=UNSPECIFIED_PROVINCE, make=None, color=None
        )

    def test_blank_details_become_none(self):
        result = parse_recognition('{"plate": "1กข1234", "make": "  ", "color": ""}')
        assert result.make is None
        assert result.color is None


class TestFramePreprocessor:
    """Tests for FramePreprocessor."""

    def test_decode_valid_image(self, sample_image_bytes: bytes):
        image = FramePreprocessor().decode(sample_image_bytes)
        assert image.shape == (480, 640, 3)

    @pytest.mark.parametrize("data", [b"", b"definitely not an image"])
    def test_decode_invalid_bytes(self, data: bytes):
        with pytest.raises(RecognitionError):
            FramePreprocessor().decode(data)

    def test_downscale_wide_frame(self):
        image = np.zeros((2160, 3840, 3), dtype=np.uint8)
        resized = FramePreprocessor(max_width=1920).downscale(image)
        assert resized.shape == (1080, 1920, 3)

    def test_small_frame_untouched(self):
        image = np.zeros((480, 640, 3), dtype=np.uint8)
        assert FramePreprocessor(max_width=1920).downscale(image) is image

    def test_to_jpeg(self):
        image = np.zeros((100, 200, 3), dtype=np.uint8)
        data = FramePreprocessor().to_jpeg(image)
        assert data[:2] == b"\xff\xd8"


class TestVisionPlateRecognizer:
    """Tests for the OpenAI-backed recognizer."""

    @pytest.fixture
    def frame(self) -> np.ndarray:
        return np.zeros((480, 640, 3), dtype=np.uint8)

    def test_recognize_parses_answer(self, frame: np.ndarray):
        client = MagicMock()
        client.chat.completions.create.return_value = chat_response(
            '{"plate": "1กข1234", "province": "กรุงเทพมหานคร"}'
        )
        recognizer = VisionPlateRecognizer(client=client, model="test-model")

        result = recognizer.recognize(frame)

        assert result.plate == "1กข1234"
        assert result.province == "กรุงเทพมหานคร"

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        image_part = kwargs["messages"][0]["content"][1]
        assert image_part["image_url"]["url"].startswith("data:image/jpeg;base64,")

    def test_no_plate(self, frame: np.ndarray):
        client = MagicMock()
        client.chat.completions.create.return_value = chat_response('{"plate": null}')

        assert VisionPlateRecognizer(client=client).recognize(frame) is None

    def test_empty_choices(self, frame: np.ndarray):
        client = MagicMock()
        response = MagicMock()
        response.choices = []
        client.chat.completions.create.return_value = response

        assert VisionPlateRecognizer(client=client).recognize(frame) is None

    def test_api_error_raises_recognition_error(self, frame: np.ndarray):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.OpenAIError("quota exceeded")

        with pytest.raises(RecognitionError, match="quota exceeded"):
            VisionPlateRecognizer(client=client).recognize(frame)


class TestEasyOCRPlateRecognizer:
    """Tests for the local OCR recognizer."""

    def test_joins_confident_boxes(self, monkeypatch):
        reader = MagicMock()
        reader.readtext.return_value = [
            ([[0, 0]], "1กข", 0.9),
            ([[0, 0]], "1234", 0.7),
            ([[0, 0]], "noise", 0.05),
        ]
        monkeypatch.setattr(EasyOCRPlateRecognizer, "_reader", reader)

        result = EasyOCRPlateRecognizer().recognize(np.zeros((10, 10, 3), dtype=np.uint8))

        assert result == PlateRecognition(plate="1กข1234")

    def test_nothing_read(self, monkeypatch):
        reader = MagicMock()
        reader.readtext.return_value = []
        monkeypatch.setattr(EasyOCRPlateRecognizer, "_reader", reader)

        assert EasyOCRPlateRecognizer().recognize(np.zeros((10, 10, 3), dtype=np.uint8)) is None

    def test_only_separators_read(self, monkeypatch):
        reader = MagicMock()
        reader.readtext.return_value = [([[0, 0]], "-", 0.8), ([[0, 0]], " ", 0.6)]
        monkeypatch.setattr(EasyOCRPlateRecognizer, "_reader", reader)

        assert EasyOCRPlateRecognizer().recognize(np.zeros((10, 10, 3), dtype=np.uint8)) is None

    def test_reader_failure(self, monkeypatch):
        reader = MagicMock()
        reader.readtext.side_effect = RuntimeError("bad tensor")
        monkeypatch.setattr(EasyOCRPlateRecognizer, "_reader", reader)

        with pytest.raises(RecognitionError):
            EasyOCRPlateRecognizer().recognize(np.zeros((10, 10, 3), dtype=np.uint8))


class TestRecognizerSelection:

    def test_mock_backend_from_settings(self):
        assert isinstance(get_plate_recognizer(), MockPlateRecognizer)

    def test_mock_returns_configured_result(self):
        expected = PlateRecognition(plate="1กข1234")
        recognizer = MockPlateRecognizer(result=expected)
        assert recognizer.recognize(np.zeros((1, 1, 3), dtype=np.uint8)) is expected
