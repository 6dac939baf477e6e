"""FastAPI application exposing the speech recognition endpoint and the single-page UI."""

import logging
import os

from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from . import __version__
from .config import Settings, get_settings
from .exceptions import GatewayError, InternalError, ValidationError
from .models import ErrorBody, HealthResponse, ProcessingResult, UploadedFile, is_wav
from .recognition_service import Recognizer, build_recognizer

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024
INDEX_PATH = os.path.join(os.path.dirname(__file__), "index.html")

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_recognizer(request: Request) -> Recognizer:
    return request.app.state.recognizer


def size_limit_message(max_bytes: int) -> str:
    if max_bytes % MEGABYTE == 0:
        limit = f"{max_bytes // MEGABYTE}MB"
    else:
        limit = f"{max_bytes} bytes"
    return f"File too large. Please upload a file smaller than {limit}."


async def read_upload(audio: UploadFile | None, max_bytes: int) -> UploadedFile:
    """Validate the multipart ``audio`` part and read it into an UploadedFile.

    Checks run in order: presence, .wav type, size. The size reported by the
    multipart parser is checked before anything is read into memory.
    """
    if audio is None:
        logger.warning("Rejected request without audio file")
        raise ValidationError("No audio file provided")

    name = audio.filename or ""
    if not is_wav(name, audio.content_type):
        logger.warning("Rejected %s (%s): not a .wav file", name, audio.content_type)
        raise ValidationError("Invalid file type. Please upload a .wav file.")

    if audio.size is not None and audio.size > max_bytes:
        logger.warning("Rejected %s: %d bytes exceeds %d", name, audio.size, max_bytes)
        raise ValidationError(size_limit_message(max_bytes))

    data = await audio.read()
    if len(data) > max_bytes:
        logger.warning("Rejected %s: %d bytes exceeds %d", name, len(data), max_bytes)
        raise ValidationError(size_limit_message(max_bytes))

    return UploadedFile(name=name, size=len(data), content_type=audio.content_type, data=data)


@router.get("/")
async def get_index() -> HTMLResponse:
    """Serve the index.html single-page UI."""
    with open(INDEX_PATH, encoding="utf-8") as f:
        return HTMLResponse(f.read())


@router.get("/health", response_model=HealthResponse)
async def health(recognizer: Recognizer = Depends(get_recognizer)) -> HealthResponse:
    return HealthResponse(mode=recognizer.mode)


@router.post(
    "/api/speech-recognition",
    response_model=ProcessingResult,
    responses={400: {"model": ErrorBody}, 500: {"model": ErrorBody}},
)
async def speech_recognition(
    audio: UploadFile | None = File(None),
    settings: Settings = Depends(get_app_settings),
    recognizer: Recognizer = Depends(get_recognizer),
) -> JSONResponse:
    """Validate the uploaded .wav file and return its transcription."""
    try:
        upload = await read_upload(audio, settings.max_upload_bytes)
        logger.info("Processing %s (%d bytes) in %s mode", upload.name, upload.size, recognizer.mode)
        result = await recognizer.recognize(upload)
    except GatewayError:
        raise
    except Exception:
        logger.exception("Speech recognition error")
        raise InternalError() from None
    return JSONResponse(result.to_response())


def register_error_handlers(app: FastAPI) -> None:
    """Render every gateway error as ``{"error": message}``."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(_request: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # A text field named "audio" lands here instead of the route
        logger.warning("Malformed speech recognition request: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": "No audio file provided"})


def create_app(settings: Settings | None = None, **recognizer_options) -> FastAPI:
    """Build the application for one deployment mode.

    ``recognizer_options`` are passed to ``build_recognizer`` (e.g. an httpx
    transport for the proxy mode).
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Speech Recognition Gateway",
        description="Upload a .wav clip and get back its transcription.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.recognizer = build_recognizer(settings, **recognizer_options)

    register_error_handlers(app)
    app.include_router(router)

    logger.info("Speech recognition gateway ready in %s mode", settings.recognition_mode)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("speechgate.main:app", host=_settings.app_host, port=_settings.app_port)
