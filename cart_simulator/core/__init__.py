# Core modules

from .config import Settings, get_settings
from .result import OperationResult, FailureReason

__all__ = ["Settings", "get_settings", "OperationResult", "FailureReason"]
