"""Request and response models for the speech recognition gateway."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

WAV_CONTENT_TYPE = "audio/wav"
WAV_SUFFIX = ".wav"


def is_wav(name: str, content_type: str | None) -> bool:
    # audio/wav, audio/wave and audio/wav;codecs=1 all qualify
    return WAV_CONTENT_TYPE in (content_type or "") or name.endswith(WAV_SUFFIX)


class UploadedFile(BaseModel):
    """An audio file received from the client, fully read into memory."""

    name: str
    size: int = Field(ge=0)
    content_type: str | None = None
    data: bytes = Field(repr=False)

    @property
    def is_wav(self) -> bool:
        return is_wav(self.name, self.content_type)


class ProcessingResult(BaseModel):
    """Transcription returned to the client.

    The simulated recognizer fills ``file_name`` and ``file_size``. Results
    built with ``from_upstream`` keep the upstream body and send it back
    untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    transcription: str
    confidence: float = Field(ge=0.0, le=1.0)
    duration: float = Field(ge=0.0)
    processing_time: float = Field(ge=0.0, alias="processingTime")
    file_name: str | None = Field(default=None, alias="fileName")
    file_size: int | None = Field(default=None, alias="fileSize")

    _payload: dict[str, Any] | None = PrivateAttr(default=None)

    @classmethod
    def from_upstream(cls, payload: Any) -> "ProcessingResult":
        """Validate ``payload`` against the result contract and remember it as sent."""
        result = cls.model_validate(payload)
        result._payload = payload
        return result

    def to_response(self) -> dict[str, Any]:
        if self._payload is not None:
            return self._payload
        return self.model_dump(by_alias=True, exclude_unset=True)


class ErrorBody(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    mode: Literal["simulated", "proxy"]
