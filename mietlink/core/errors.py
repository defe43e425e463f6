"""Error taxonomy shared by the domain modules, services and routers."""


class MietlinkError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.error)
        self.message = message or self.error


class ValidationError(MietlinkError):
    status_code = 400
    error = "validation_error"


class DuplicateApplication(MietlinkError):
    status_code = 400
    error = "duplicate_application"


class Forbidden(MietlinkError):
    status_code = 403
    error = "forbidden"


class NotFoundError(MietlinkError):
    status_code = 404
    error = "not_found"


class PropertyClosed(MietlinkError):
    status_code = 409
    error = "property_closed"


class AlreadyDecided(MietlinkError):
    status_code = 409
    error = "already_decided"


class SlotFull(MietlinkError):
    status_code = 409
    error = "slot_full"


class ExternalServiceFailure(MietlinkError):
    """Raised when the classifier / extractor is unreachable, times out or answers garbage."""

    status_code = 502
    error = "external_service_failure"

    def __init__(self, message: str = "", service: str = "gemini"):
        super().__init__(message)
        self.service = service


class PersistenceError(MietlinkError):
    status_code = 500
    error = "persistence_error"
