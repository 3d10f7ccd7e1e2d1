"""toolrunner: function-call execution and result caching for LLM tool use.

Tool calls from a chat completion go through a FunctionExecutor, which
decodes arguments, dispatches to a registered handler and returns a
normalized FunctionMessage (errors included) for the chat history. A
CachedExecutor sits in front of it and serves repeated calls from a
two-tier ResultCache.

Example:
    >>> from toolrunner import FunctionExecutor, FunctionRegistry, ToolCall, register_builtins
    >>> executor = FunctionExecutor(register_builtins(FunctionRegistry(), latency=0))
    >>> msg = await executor.execute(ToolCall.create(
    ...     "call_1", "calculate", '{"operation": "add", "operands": [1, 2]}'
    ... ))
    >>> msg.content
    '{"operation":"add","operands":[1.0,2.0],"result":3.0}'
"""

__version__ = "0.1.0"

from .cache import (
    CacheEntry,
    CacheStats,
    DurableStore,
    FileStore,
    MemoryTier,
    NullStore,
    RedisStore,
    ResultCache,
    make_key,
)
from .factory import build_cache, build_cached_executor, build_executor, build_registry, build_store
from .foundation.config import ToolrunnerSettings, clear_settings_cache, get_settings
from .foundation.errors import (
    ArgumentParseError,
    Err,
    ErrorCode,
    ExecutionCancelledError,
    FunctionError,
    HandlerExecutionError,
    InvalidParameterTypeError,
    InvalidParameterValueError,
    MissingParameterError,
    Ok,
    Result,
    UnknownFunctionError,
)
from .functions import (
    Arguments,
    CachedExecutor,
    ExecutionEntry,
    ExecutionLog,
    ExecutionStatus,
    FunctionCall,
    FunctionExecutor,
    FunctionMessage,
    FunctionParams,
    FunctionRegistry,
    ToolCall,
    register_builtins,
)
from .observability import configure_logging, get_logger

__all__ = [
    "__version__",
    # Functions
    "ToolCall", "FunctionCall", "FunctionMessage", "Arguments",
    "FunctionRegistry", "FunctionParams", "FunctionExecutor", "CachedExecutor", "register_builtins",
    "ExecutionEntry", "ExecutionStatus", "ExecutionLog",
    # Cache
    "ResultCache", "MemoryTier", "DurableStore", "FileStore", "RedisStore", "NullStore",
    "CacheEntry", "CacheStats", "make_key",
    # Errors
    "ErrorCode", "FunctionError", "ArgumentParseError", "UnknownFunctionError",
    "MissingParameterError", "InvalidParameterTypeError", "InvalidParameterValueError", "HandlerExecutionError",
    "ExecutionCancelledError", "Result", "Ok", "Err",
    # Config / factories
    "ToolrunnerSettings", "get_settings", "clear_settings_cache",
    "build_cache", "build_store", "build_registry", "build_executor", "build_cached_executor",
    # Logging
    "configure_logging", "get_logger",
]
