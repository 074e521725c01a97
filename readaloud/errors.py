# readaloud/errors.py
from typing import Optional


class ReadAloudError(Exception):
    """Base class for every error this package raises."""


class BadRequest(ReadAloudError):
    """The upload request carried no file."""


class ExtractionError(ReadAloudError):
    """The uploaded payload could not be turned into text."""


class NetworkError(ReadAloudError):
    """The client could not reach the extraction service, or it answered non-2xx."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UserInputError(ReadAloudError):
    """The user submitted without choosing a file."""
