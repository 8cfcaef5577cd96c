class StorefrontError(Exception):
    pass


class ValidationError(StorefrontError):
    """A required field is missing or the request cannot be satisfied as given."""

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


class ServiceError(StorefrontError):
    """The catalog or auth backend failed or could not be reached.

    ``status`` is the HTTP status the upstream answered with, or None when it
    was unreachable.
    """

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def unreachable(self) -> bool:
        return self.status is None
