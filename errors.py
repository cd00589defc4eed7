"""Domain errors raised by the registry, the submission store and auth helpers.

main.py maps each class onto an HTTP status code.
"""


class FormsError(Exception):
    """Base class for expected, client-facing failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FormsError):
    """A required request field is missing."""
    status_code = 400


class NotFound(FormsError):
    """A referenced form or submission id does not exist."""
    status_code = 404


class Forbidden(FormsError):
    """The caller's identity is not allowed to perform the operation."""
    status_code = 403
