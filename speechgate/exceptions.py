"""
Gateway exception hierarchy.

Every error the endpoint reports to the client inherits from GatewayError
and is rendered as ``{"error": message}`` with its status code.
"""


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str = "Internal server error during speech recognition processing",
        status_code: int = 500,
    ) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(GatewayError):
    """Raised when the uploaded audio is missing, not a .wav file, or too large."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=400)


class UpstreamError(GatewayError):
    """Raised when the external prediction service does not answer with success."""

    def __init__(
        self,
        status_code: int,
        message: str = "Speech recognition service request failed",
    ) -> None:
        super().__init__(message=message, status_code=status_code)


class InternalError(GatewayError):
    """Raised for unexpected failures; details stay in the server log."""

    def __init__(self) -> None:
        super().__init__(status_code=500)


class ConfigurationError(GatewayError):
    """Raised at startup when the settings cannot produce a working recognizer."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=500)
