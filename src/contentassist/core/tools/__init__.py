from .dispatcher import ToolDispatcher
from .registry import TOOL_SPECS, ToolName, ToolRegistry, ToolSpec

__all__ = ["TOOL_SPECS", "ToolDispatcher", "ToolName", "ToolRegistry", "ToolSpec"]
