"""
Error taxonomy shared by the validators, stores and routers.

Every error carries the HTTP status code the API answers with, so routers
can translate them without a lookup table.
"""

from typing import Optional


class DevEventError(Exception):
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    @property
    def cause(self) -> str:
        return type(self).__name__


# -------- Validation / normalization --------

class ValidationError(DevEventError):
    status_code = 400


class RequiredFieldError(ValidationError):
    pass


class SlugGenerationError(ValidationError):
    pass


class EmptySlugError(SlugGenerationError):
    pass


class InvalidDateError(ValidationError):
    pass


class InvalidTimeError(ValidationError):
    pass


class EmptyCollectionError(ValidationError):
    pass


class InvalidEmailError(ValidationError):
    pass


class DanglingReferenceError(ValidationError):
    status_code = 404


# -------- Store --------

class DuplicateSlugError(DevEventError):
    status_code = 409


class EventNotFoundError(DevEventError):
    status_code = 404


class StoreError(DevEventError):
    status_code = 500


class DatabaseConnectionError(DevEventError, ConnectionError):
    status_code = 503


# -------- External services --------

class UploadError(DevEventError):
    status_code = 502
