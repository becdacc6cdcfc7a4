"""LLM-callable tools."""
from lesson_agent.tools.base import AgentTool, ToolExecutionContext, ToolResult, ProgressUpdate
from lesson_agent.tools.registry import ToolRegistry, create_default_registry
