"""Foundation layer: errors, Result monad, and configuration."""

from .config import ToolrunnerSettings, clear_settings_cache, get_settings
from .errors import ErrorCode, Err, FunctionError, Ok, Result

__all__ = [
    "ToolrunnerSettings", "get_settings", "clear_settings_cache",
    "ErrorCode", "FunctionError", "Result", "Ok", "Err",
]
