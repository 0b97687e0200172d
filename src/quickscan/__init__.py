from . import app, exceptions
from .exceptions import QuickScanError

__version__ = "0.1.0"

__all__ = ["QuickScanError", "__version__", "app", "exceptions"]
