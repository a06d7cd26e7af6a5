"""Domain-specific exceptions"""

from enum import Enum


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CashflowErrorCode(str, Enum):
    """Validation failure kinds reported before a projection runs"""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DAY = "INVALID_DAY"
    INVALID_FREQUENCY = "INVALID_FREQUENCY"
    INVALID_CERTAINTY = "INVALID_CERTAINTY"
    INVALID_PROJECTION_DAYS = "INVALID_PROJECTION_DAYS"


class CashflowValidationError(DomainException):
    """Projection input violates a shape or value constraint"""

    def __init__(self, code: CashflowErrorCode, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.code = code
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code.value, "field": self.field, "message": self.message}
