# autotrash/game/exceptions.py

class AutoTrashError(Exception):
    """Base class for auto-trash errors."""
    pass

class InvalidSettingsRecordError(AutoTrashError):
    """Raised when a persisted settings record cannot be decoded."""
    pass

class InvalidTransactionError(AutoTrashError):
    """Raised when an inventory transaction payload cannot be decoded."""
    pass
