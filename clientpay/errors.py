"""Error types shared by the store gateway, actions and the UI."""

from dataclasses import dataclass, field
from enum import Enum


class ErrorCode(Enum):
    """Error codes surfaced to the user."""

    CONFIG_MISSING = "CONFIG_MISSING"
    STORE_FAILED = "STORE_FAILED"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"


@dataclass(eq=False)
class ClientPayError(Exception):
    """Base error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return self.message


class ConfigError(ClientPayError):
    """Raised at startup when store secrets are missing or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CONFIG_MISSING, message=message)


class StoreError(ClientPayError):
    """Raised when a read or write against the hosted store fails."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STORE_FAILED) -> None:
        super().__init__(code=code, message=message)


class RecordNotFoundError(StoreError):
    """Raised when an update targets an id the store does not hold."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(
            message=f"No record {record_id} in {collection}",
            code=ErrorCode.RECORD_NOT_FOUND,
        )
        self.record_id = record_id


@dataclass(eq=False)
class ValidationError(ClientPayError):
    """Raised before any store call when the form is incomplete."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED
    message: str = "Fill required fields"
    problems: tuple = field(default_factory=tuple)

    def __str__(self) -> str:
        if self.problems:
            return f"{self.message}: {'; '.join(self.problems)}"
        return self.message
