"""Exception hierarchy shared across layers"""

from typing import List, Optional


class InspectorError(Exception):
    """Base class for service errors"""

    pass


class ConfigValidationError(InspectorError):
    """Malformed or out-of-range configuration or request fields.

    Raised before any provider call; maps to HTTP 400.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class ProviderError(InspectorError):
    """Remote LLM provider rejected the call"""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        parameter: Optional[str] = None,
        error_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.parameter = parameter
        self.error_type = error_type

    def __repr__(self) -> str:
        return (
            f"ProviderError(status={self.status!r}, code={self.code!r}, "
            f"parameter={self.parameter!r}, message={self.message!r})"
        )


class ProviderTimeoutError(InspectorError):
    """Provider call exceeded the allowed time"""

    def __init__(self, seconds: float):
        super().__init__(f"Provider did not respond within {seconds:g} seconds")
        self.seconds = seconds


class UploadError(InspectorError):
    """Uploaded image could not be staged or read"""

    pass
