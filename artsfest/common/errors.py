"""Error taxonomy for the registration workflow.

Every error is an ``HTTPException`` so services can raise them directly and
FastAPI renders ``{"detail": ...}`` with the matching status code.
"""

from typing import Optional

from fastapi import HTTPException, status


class RegistrationError(HTTPException):
    default_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Registration failed"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.default_status, detail=detail or self.default_detail)


class ValidationError(RegistrationError):
    default_detail = "Invalid input"


class DuplicateName(RegistrationError):
    default_detail = "A participant with this name already exists. Please use a different name."


class InvalidTeam(RegistrationError):
    default_detail = "Invalid team selected"


class InvalidCode(RegistrationError):
    default_status = status.HTTP_404_NOT_FOUND
    default_detail = "Invalid code. Please check and try again."


class NotFound(RegistrationError):
    default_status = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class PersistenceConflict(RegistrationError):
    default_status = status.HTTP_409_CONFLICT
    default_detail = "Conflicting write, please retry"
