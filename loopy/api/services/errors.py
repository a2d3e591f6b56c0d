"""Service-level errors. Routes map them to HTTP status codes in main.py."""


class NotFoundError(LookupError):
    """Row does not exist or belongs to another user. Both look the same to the caller."""

    def __init__(self, what: str):
        super().__init__(f"{what}_not_found")
        self.code = f"{what}_not_found"


class ValidationError(ValueError):
    """Input breaks a rule. code is a short machine string (e.g. 'slug_invalid')."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code


class ConflictError(ValueError):
    """Write would violate uniqueness or a delete precondition."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code
