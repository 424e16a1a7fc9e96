"""
Error taxonomy for ledger operations.

Every error carries a human-readable ``message`` (rendered to callers as-is),
a machine ``code`` and the HTTP ``status_code`` the API layer answers with.

    try:
        transfers.execute_transfer(request)
    except InsufficientStockError as exc:
        print(exc.message)  # "Insufficient stock. Available: 50, Requested: 80"
"""

from typing import Any, Optional


class InventoryError(Exception):
    status_code = 500
    default_code = "INTERNAL_ERROR"
    retryable = False

    def __init__(self, message: str, code: Optional[str] = None, **data: Any):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data = data

    def as_dict(self) -> dict[str, Any]:
        payload = {"message": self.message, "code": self.code}
        payload.update(self.data)
        return payload


class ValidationError(InventoryError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class InsufficientStockError(InventoryError):
    status_code = 422
    default_code = "INSUFFICIENT_STOCK"

    def __init__(self, available: int, requested: int):
        super().__init__(
            "Insufficient stock. Available: {}, Requested: {}".format(available, requested),
            available=available,
            requested=requested,
        )

    @property
    def available(self) -> int:
        return self.data["available"]

    @property
    def requested(self) -> int:
        return self.data["requested"]


class NotFoundError(InventoryError):
    status_code = 404
    default_code = "NOT_FOUND"


class InvalidStateError(InventoryError):
    status_code = 409
    default_code = "INVALID_STATE"


class LockAcquisitionError(InventoryError):
    status_code = 503
    default_code = "LOCK_TIMEOUT"
    retryable = True


class StorageIOError(InventoryError):
    default_code = "STORAGE_IO_ERROR"


class StorageParseError(InventoryError):
    default_code = "STORAGE_PARSE_ERROR"


__all__ = [
    "InsufficientStockError",
    "InvalidStateError",
    "InventoryError",
    "LockAcquisitionError",
    "NotFoundError",
    "StorageIOError",
    "StorageParseError",
    "ValidationError",
]
