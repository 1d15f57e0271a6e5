"""
Failure taxonomy for identity resolution, authorization and vendor lifecycle.
Every error carries the HTTP status it surfaces as and a message safe to show the operator.
"""
from fastapi import status


class PolicyError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be completed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredential(PolicyError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class TooManyAttempts(PolicyError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many failed attempts. Please try again later or reset your password."


class AccountNotApproved(PolicyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Your vendor account is not active. It may be pending admin approval or suspended."


class PermissionDenied(PolicyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied"

    def __init__(self, reason: str = None):
        self.reason = reason or self.default_message
        super().__init__(self.reason)


class NotFound(PolicyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class AlreadyExists(PolicyError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record already exists"


class WeakSecret(PolicyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Password is too weak"


class InvalidEmail(PolicyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid email address"


class InvalidTransition(PolicyError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Transition is not allowed from the current state"


class ValidationFailed(PolicyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class StoreError(PolicyError):
    """Transient failure of the document store, credential store or blob store."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Storage backend is unavailable. Please retry."
