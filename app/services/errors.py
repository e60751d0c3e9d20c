class ServiceError(Exception):
    """Business-rule failure carrying the HTTP status it maps to.

    ``message`` is the human-readable text shown in the mini-app,
    ``error`` a short stable code clients can branch on.
    """

    status_code = 400

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message)
        self.message = message
        self.error = error or message


class BadRequest(ServiceError):
    status_code = 400


class Unauthorized(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409
