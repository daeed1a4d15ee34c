"""Service-layer error taxonomy.

Services raise these instead of building HTTP responses; the API exception
handler maps ``status_code`` onto the response.  They subclass ``ValueError``
so callers that only care about "the operation was refused" can keep
catching that.
"""


class ServiceError(ValueError):
    status_code = 400

    def __init__(self, message, *, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(ServiceError):
    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409
