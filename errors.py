# Error taxonomy shared by the services and the API layer
from flask import jsonify


class ServiceError(Exception):
    """Base class for failures a service reports to its caller."""

    message = 'Request failed.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(ServiceError):
    message = 'Invalid request.'


class Unauthorized(ServiceError):
    message = 'Authentication required.'


class Forbidden(ServiceError):
    message = 'Forbidden.'


class InvalidToken(Forbidden):
    message = 'Invalid or expired token.'


class NotFound(ServiceError):
    message = 'Not found.'


class Conflict(ServiceError):
    message = 'Conflict.'


STATUS_CODES = {
    ValidationError: 400,
    Unauthorized: 401,
    Forbidden: 403,
    NotFound: 404,
    Conflict: 409,
}


def status_for(error):
    """Look up the HTTP status for a service error, most specific class first."""
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_response(error):
    return jsonify({"message": error.message}), status_for(error)
