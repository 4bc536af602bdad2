from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for analysis pipeline errors."""


class ConfigurationError(AnalysisError):
    """Model credentials are not configured."""


class AnalysisValidationError(AnalysisError):
    """Model output could not be shaped into an AnalysisData at all."""


class ModelError(AnalysisError):
    """The model call did not produce a usable analysis."""


class NetworkError(ModelError):
    pass


class ModelTimeoutError(NetworkError):
    pass


class ModelHTTPError(ModelError):
    def __init__(self, status_code: int, body: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Model endpoint returned HTTP {status_code}: {body or ''}".rstrip(": "))


class ParseError(ModelError):
    pass
