"""This package contains the recognizers behind the speech recognition endpoint"""

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod

import httpx
import pydantic

from .config import Settings
from .exceptions import ConfigurationError, UpstreamError
from .models import WAV_CONTENT_TYPE, ProcessingResult, UploadedFile

logger = logging.getLogger(__name__)

SAMPLE_TRANSCRIPTIONS = (
    "Hello, this is a test of the speech recognition system. The weather is beautiful today.",
    "Welcome to our AI-powered speech recognition platform. We hope you find it useful.",
    "The quick brown fox jumps over the lazy dog. This is a common phrase used for testing.",
    "Artificial intelligence has revolutionized the way we process and understand human speech.",
    "Thank you for using our speech recognition service. We appreciate your feedback.",
    "Machine learning algorithms can now transcribe speech with remarkable accuracy.",
    "This technology opens up new possibilities for accessibility and automation.",
    "Voice recognition systems are becoming increasingly sophisticated and reliable.",
)

CONFIDENCE_RANGE = (0.85, 0.99)
DURATION_RANGE = (3.0, 15.0)


class Recognizer(ABC):
    """Turns a validated upload into a ProcessingResult."""

    mode: str

    @abstractmethod
    async def recognize(self, audio: UploadedFile) -> ProcessingResult:
        """Produce the transcription result for ``audio``."""


class SimulatedRecognizer(Recognizer):
    """Fabricates a plausible transcription after an artificial delay."""

    mode = "simulated"

    def __init__(
        self,
        delay_min: float = 2.0,
        delay_max: float = 5.0,
        rng: random.Random | None = None,
    ) -> None:
        if delay_min < 0 or delay_max < delay_min:
            raise ConfigurationError(
                f"Invalid simulated delay window: [{delay_min}, {delay_max}]"
            )
        self.delay_min = delay_min
        self.delay_max = delay_max
        self.rng = rng or random.Random()

    async def recognize(self, audio: UploadedFile) -> ProcessingResult:
        started = time.perf_counter()
        # Sleep on the event loop so concurrent requests keep being served
        await asyncio.sleep(self.rng.uniform(self.delay_min, self.delay_max))

        result = ProcessingResult(
            transcription=self.rng.choice(SAMPLE_TRANSCRIPTIONS),
            confidence=self.rng.uniform(*CONFIDENCE_RANGE),
            duration=self.rng.uniform(*DURATION_RANGE),
            processing_time=time.perf_counter() - started,
            file_name=audio.name,
            file_size=audio.size,
        )
        logger.info(
            "Simulated transcription for %s in %.2fs", audio.name, result.processing_time
        )
        return result


class ProxyRecognizer(Recognizer):
    """Forwards the upload to ``{base_url}/predict-audio`` and relays the answer."""

    mode = "proxy"

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = f"{base_url.rstrip('/')}/predict-audio"
        self.timeout = timeout
        self._transport = transport

    async def recognize(self, audio: UploadedFile) -> ProcessingResult:
        files = {"file": (audio.name, audio.data, audio.content_type or WAV_CONTENT_TYPE)}

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.post(self.endpoint, files=files)

        if not response.is_success:
            logger.error(
                "Upstream %s answered %s: %s",
                self.endpoint,
                response.status_code,
                response.text,
            )
            raise UpstreamError(response.status_code)

        try:
            return ProcessingResult.from_upstream(response.json())
        except (ValueError, pydantic.ValidationError) as exc:
            # ValueError covers undecodable JSON
            logger.error("Unusable upstream body from %s: %s", self.endpoint, exc)
            raise UpstreamError(502) from exc


def build_recognizer(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> Recognizer:
    """Create the recognizer for the configured deployment mode."""
    if settings.recognition_mode == "proxy":
        if not settings.api_base_url:
            raise ConfigurationError(
                "API_BASE_URL must be set when RECOGNITION_MODE is 'proxy'"
            )
        return ProxyRecognizer(
            settings.api_base_url, timeout=settings.upstream_timeout, transport=transport
        )
    return SimulatedRecognizer(settings.simulated_delay_min, settings.simulated_delay_max)
