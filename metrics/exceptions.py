"""Exceptions raised by the metrics package."""


class ValidationError(ValueError):
    """Configuration failed a precondition.

    Carries the offending values so callers can surface them.
    """

    def __init__(self, message: str, values: dict | None = None):
        super().__init__(message)
        self.message = message
        self.values = values or {}

    def __str__(self) -> str:
        if not self.values:
            return super().__str__()
        return f"{super().__str__()}: {self.values}"
