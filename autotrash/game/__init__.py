from .exceptions import (
    AutoTrashError,
    InvalidSettingsRecordError,
    InvalidTransactionError
)

__all__ = [
    "AutoTrashError",
    "InvalidSettingsRecordError",
    "InvalidTransactionError",
]
