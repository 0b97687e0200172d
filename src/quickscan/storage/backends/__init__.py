from .remote import RemoteBackend
from .temporary import TemporaryBackend

__all__ = ["RemoteBackend", "TemporaryBackend"]
