from .models import FileDescriptor
from .storage import StorageBackend, StorageError, UniqueNameExhaustedError

__all__ = ["FileDescriptor", "StorageBackend", "StorageError", "UniqueNameExhaustedError"]
