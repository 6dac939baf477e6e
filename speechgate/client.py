"""Upload client mirroring the browser UI: one file, cosmetic progress, then the result."""

import asyncio
import logging
import mimetypes
import os
from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx

from .models import ProcessingResult

logger = logging.getLogger(__name__)

ENDPOINT = "/api/speech-recognition"
DEFAULT_ERROR = "Failed to process audio file"
TRANSPORT_ERROR = "An error occurred during processing"


class InvalidTransition(Exception):
    """Raised when a state change is not allowed from the current state."""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Uploading:
    progress: int = 0


@dataclass(frozen=True)
class Processing:
    pass


@dataclass(frozen=True)
class ResultReady:
    result: ProcessingResult


@dataclass(frozen=True)
class Failed:
    message: str


ClientState = Idle | Uploading | Processing | ResultReady | Failed


def is_busy(state: ClientState) -> bool:
    return isinstance(state, (Uploading, Processing))


def start_upload(state: ClientState) -> Uploading:
    if is_busy(state):
        raise InvalidTransition(f"Cannot start an upload while {type(state).__name__}")
    return Uploading(0)


def advance_progress(state: ClientState, step: int = 10) -> Uploading:
    if not isinstance(state, Uploading):
        raise InvalidTransition(f"No upload in progress ({type(state).__name__})")
    return Uploading(min(100, state.progress + step))


def begin_processing(state: ClientState) -> Processing:
    if not isinstance(state, Uploading) or state.progress < 100:
        raise InvalidTransition(f"Upload not finished ({state!r})")
    return Processing()


def complete(state: ClientState, result: ProcessingResult) -> ResultReady:
    if not isinstance(state, Processing):
        raise InvalidTransition(f"Nothing is processing ({type(state).__name__})")
    return ResultReady(result)


def fail(state: ClientState, message: str) -> Failed:
    if not is_busy(state):
        raise InvalidTransition(f"Nothing to fail ({type(state).__name__})")
    return Failed(message)


@dataclass(frozen=True)
class AudioSource:
    """A file picked by the user."""

    name: str
    data: bytes = field(repr=False)
    content_type: str | None = None

    @classmethod
    def from_path(cls, path: str) -> "AudioSource":
        with open(path, "rb") as f:
            data = f.read()
        content_type, _ = mimetypes.guess_type(path)
        return cls(os.path.basename(path), data, content_type)


def format_metrics(result: ProcessingResult) -> dict[str, str]:
    """The three figures shown in the result dialog."""
    return {
        "confidence": f"{result.confidence * 100:.1f}%",
        "duration": f"{result.duration:.1f}s",
        "processing_time": f"{result.processing_time:.1f}s",
    }


class UploadSession:
    """One user's upload session against the gateway.

    Only a single request is in flight at a time: drops arriving while an
    upload or a recognition is running are ignored.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        progress_step: int = 10,
        progress_interval: float = 0.2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.progress_step = progress_step
        self.progress_interval = progress_interval
        self._transport = transport
        self.state: ClientState = Idle()
        self.file: AudioSource | None = None
        self.dialog_open = False
        self._generation = 0

    @property
    def is_processing(self) -> bool:
        return is_busy(self.state)

    @property
    def result(self) -> ProcessingResult | None:
        return self.state.result if isinstance(self.state, ResultReady) else None

    @property
    def error(self) -> str | None:
        return self.state.message if isinstance(self.state, Failed) else None

    @property
    def metrics(self) -> dict[str, str] | None:
        """Figures for the result dialog while it is open."""
        if not self.dialog_open or self.result is None:
            return None
        return format_metrics(self.result)

    def drop(self, files: Sequence[AudioSource]) -> AudioSource | None:
        """Accept the first dropped file, or nothing while busy."""
        if not files or self.is_processing:
            return None
        self.state = start_upload(self.state)
        self._generation += 1
        self.file = files[0]
        self.dialog_open = False
        return self.file

    async def upload(self, files: Sequence[AudioSource]) -> ClientState:
        """Drop ``files``, run the progress animation, then ask for a transcription."""
        audio = self.drop(files)
        if audio is None:
            logger.debug("Ignored drop of %d file(s) in state %r", len(files), self.state)
            return self.state

        generation = self._generation
        while self._current(generation, Uploading) and self.state.progress < 100:
            await asyncio.sleep(self.progress_interval)
            if self._current(generation, Uploading):
                self.state = advance_progress(self.state, self.progress_step)

        if self._current(generation, Uploading):
            self.state = begin_processing(self.state)
            await self._process(audio, generation)
        return self.state

    async def _process(self, audio: AudioSource, generation: int) -> None:
        files = {"audio": (audio.name, audio.data, audio.content_type or "application/octet-stream")}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, transport=self._transport, timeout=None
            ) as client:
                response = await client.post(ENDPOINT, files=files)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", self.base_url, exc)
            self._settle(generation, error=TRANSPORT_ERROR)
            return

        if not response.is_success:
            self._settle(generation, error=_error_message(response))
            return

        try:
            result = ProcessingResult.model_validate(response.json())
        except ValueError:
            logger.warning("Unexpected response body: %s", response.text)
            self._settle(generation, error=DEFAULT_ERROR)
            return

        self._settle(generation, result=result)

    def _current(self, generation: int, state_type: type) -> bool:
        return generation == self._generation and isinstance(self.state, state_type)

    def _settle(
        self, generation: int, result: ProcessingResult | None = None, error: str | None = None
    ) -> None:
        # A reset while the request was in flight discards its outcome
        if not self._current(generation, Processing):
            return
        if result is not None:
            self.state = complete(self.state, result)
            self.dialog_open = True
        else:
            self.state = fail(self.state, error or DEFAULT_ERROR)

    def close_dialog(self) -> None:
        self.dialog_open = False

    def reset(self) -> None:
        """Process Another File: back to idle with nothing remembered."""
        self.state = Idle()
        self.file = None
        self.dialog_open = False


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ERROR
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return DEFAULT_ERROR
