"""
Domain errors raised by the store and service layer.

Routes never build HTTP errors themselves for these; ``main`` registers a
single handler that turns any ``CertHubError`` into a JSON response.
"""


class CertHubError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(CertHubError):
    """Requested entity does not exist."""

    status_code = 404

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity


class Unauthorized(CertHubError):
    """Caller lacks the registration or role the operation needs."""

    NOT_REGISTERED = "not registered"
    NOT_ADMIN = "not admin"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
        # unknown caller -> 401, known caller without the role -> 403
        self.status_code = 401 if reason == self.NOT_REGISTERED else 403


class InvalidInput(CertHubError):
    """Request is well-formed but violates a domain constraint."""

    status_code = 422
