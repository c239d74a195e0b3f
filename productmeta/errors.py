from __future__ import annotations

from typing import Optional


class ExtractionError(Exception):
    """Base class for failures that abort an extraction."""


class FetchError(ExtractionError):
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DomainBlockedError(FetchError):
    pass


class DocumentParseError(ExtractionError):
    pass
