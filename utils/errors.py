"""
utils/errors.py
---------------
Closed set of error conditions raised by the service layer.
Surfaces (bot handlers, HTTP routes) translate these into user-facing
replies; nothing else should escape a service.
"""


class SubKeepError(Exception):
    """Base class for all domain errors."""


class ValidationError(SubKeepError):
    """
    Malformed input. Raised before any state is touched.

    Attributes:
        field: Name of the offending input field (camelCase, as on the wire).
        message: Human-readable explanation.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class UndoUnavailable(SubKeepError):
    """
    There is nothing to undo for this user.

    `reason` is one of:
        - "missing": never applied, or the last apply was already undone.
        - "expired": the undo window has elapsed.
    """

    MISSING = "missing"
    EXPIRED = "expired"

    def __init__(self, reason: str):
        super().__init__(f"Undo unavailable ({reason})")
        self.reason = reason


class StoreError(SubKeepError):
    """The subscription store could not be read or written."""
