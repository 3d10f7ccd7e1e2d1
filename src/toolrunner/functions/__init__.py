"""Function-call execution: registry, executor, log and cached front end.

- FunctionRegistry: name -> handler (plus optional FunctionParams schema), last registration wins
- FunctionExecutor: ToolCall -> FunctionMessage, one ExecutionEntry per call
- CachedExecutor: serves repeated calls from a ResultCache
- register_builtins: calculate, string_transform, process_data and simulated I/O
"""

from .arguments import Arguments
from .builtins import BUILTIN_NAMES, register_builtins
from .cached import CachedExecutor
from .executor import FunctionExecutor, invoke, parse_arguments
from .log import ExecutionLog, ExecutionStats
from .models import ExecutionEntry, ExecutionStatus, FunctionCall, FunctionMessage, ToolCall
from .registry import FunctionRegistry, Handler
from .schema import FunctionParams, validate_arguments

__all__ = [
    # Models
    "ToolCall", "FunctionCall", "FunctionMessage", "ExecutionEntry", "ExecutionStatus", "Arguments",
    # Registry
    "FunctionRegistry", "Handler", "FunctionParams", "validate_arguments", "register_builtins", "BUILTIN_NAMES",
    # Execution
    "FunctionExecutor", "parse_arguments", "invoke", "ExecutionLog", "ExecutionStats", "CachedExecutor",
]
