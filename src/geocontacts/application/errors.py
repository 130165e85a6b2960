"""Error taxonomy shared by collaborators and use cases."""


class GeoContactsError(Exception):
    """Base class. `message` is safe to show to the user."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GeoContactsError):
    """Local, field-scoped input error. Recoverable by editing the field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class NotFound(GeoContactsError):
    """The requested record (contact, postal code) does not exist."""


class Unavailable(GeoContactsError):
    """Transport or backend failure."""


class Conflict(GeoContactsError):
    """The remote service rejected a write, e.g. a duplicate national ID."""
