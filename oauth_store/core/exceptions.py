"""Exception classes for the storage layer"""

from typing import Optional, Dict, Any


class StorageError(Exception):
    """Base exception for all storage errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Lookup Errors
class RecordNotFoundError(StorageError):
    """No matching document"""
    def __init__(self, resource: str, key: str):
        super().__init__(f"{resource} not found", details={"resource": resource, "key": key})
        self.resource = resource
        self.key = key


class InvalidQueryError(StorageError):
    """Rejected filter or pagination arguments"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


# Decode Errors
class CodecError(StorageError):
    """Persisted document does not fit the record shape"""
    def __init__(self, kind: str, errors: Optional[list] = None):
        super().__init__(
            f"Malformed {kind} document",
            details={"kind": kind, "errors": errors or []}
        )
        self.kind = kind


# Lifecycle Errors
class IndexBootstrapError(StorageError):
    """Secondary index could not be created when opening the storage"""
    def __init__(self, index_name: str, reason: str):
        super().__init__(
            f"Failed to bootstrap index {index_name}: {reason}",
            details={"index": index_name}
        )


class StorageClosedError(StorageError):
    """Operation attempted on a released storage handle"""
    def __init__(self):
        super().__init__("Storage handle is closed")


# System Errors
class StoreUnavailableError(StorageError):
    """Connection or I/O failure talking to the backing store"""
    def __init__(self, message: str = "Backing store unavailable"):
        super().__init__(message)
