"""Errors raised by the margin engine."""


class MarginEngineError(Exception):
    """Base error for margin calculations."""


class InvalidInputError(MarginEngineError):
    """A required numeric input is missing, zero or negative."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class IncompleteClientConfigError(MarginEngineError):
    """The client's commercial configuration is missing required fields."""

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = list(missing_fields)
        self.message = (
            "Client commercial configuration is incomplete. Missing: "
            + ", ".join(self.missing_fields)
        )
        super().__init__(self.message)
