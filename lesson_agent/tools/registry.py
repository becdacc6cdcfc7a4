"""
Tool Registry

Holds the LLM-callable tools and runs them. execute() is the tool
boundary: it records the call and its result in the conversation, reports
progress, logs, and turns every failure into an error ToolResult.
"""

import json
import logging
import time
from typing import Any, Iterable, Optional, Union
from uuid import uuid4

from lesson_agent.config import get_settings
from lesson_agent.exceptions import LessonAgentError, ToolNotFoundError
from lesson_agent.models.tool_logs import ToolLogEntry, ToolLogStore
from lesson_agent.tools.base import AgentTool, ProgressUpdate, ToolExecutionContext, ToolResult
from lesson_agent.tools.edit_tools import create_edit_tools
from lesson_agent.tools.meta_tools import create_meta_tools, plan_section_totals
from lesson_agent.tools.read_tools import create_read_tools
from lesson_agent.utils.schema_utils import parse_tool_arguments


logger = logging.getLogger(__name__)


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


class ToolRegistry:
    """Name -> tool mapping plus the step counter for one agent run."""

    def __init__(self, tools: Optional[Iterable[AgentTool]] = None, log_store: Optional[ToolLogStore] = None):
        settings = get_settings()
        self._tools: dict[str, AgentTool] = {}
        self._preview_chars = settings.tool_log_preview_chars
        self.log_store = log_store or ToolLogStore(max_logs=settings.max_tool_logs)
        self.step_count = 0

        for tool in tools or []:
            self.register(tool)

    def register(self, tool: AgentTool) -> None:
        if tool.name in self._tools:
            logger.warning(f"Replacing registered tool: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> AgentTool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def names(self) -> list[str]:
        return list(self._tools)

    def is_final(self, name: str) -> bool:
        tool = self._tools.get(name)
        return bool(tool and tool.is_final)

    def definitions(self, strict: bool = False) -> list[dict[str, Any]]:
        return [tool.definition(strict=strict) for tool in self._tools.values()]

    def reset_steps(self) -> None:
        self.step_count = 0

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(
        self,
        name: str,
        arguments: Optional[Union[str, dict[str, Any]]],
        context: ToolExecutionContext,
        tool_call_id: Optional[str] = None,
    ) -> ToolResult:
        """
        Run one tool call.

        Args:
            name: Tool name as sent by the model
            arguments: Raw arguments (JSON string or dict)
            context: Live states plus optional parser and progress callback
            tool_call_id: Provider call id; generated when missing

        Returns:
            ToolResult. Never raises.
        """
        self.step_count += 1
        step = self.step_count
        tool_call_id = tool_call_id or f"call_{uuid4().hex[:12]}"
        conversation = context.conversation_state

        conversation.add_tool_call(name, tool_call_id, arguments)
        self._report_progress(name, step, context)

        start_time = time.time()
        logger.info(json.dumps({
            "tool": name,
            "event": "started",
            "step": step,
            "tool_call_id": tool_call_id,
        }))

        try:
            tool = self.get(name)
            args = parse_tool_arguments(arguments, tool.args_model, tool_name=name)
            result = tool.run(args, context)

        except LessonAgentError as e:
            result = ToolResult(success=False, result=f"Error: {e.message}", metadata={"error_type": type(e).__name__})

        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(json.dumps({
                "tool": name,
                "event": "failed",
                "step": step,
                "error": str(e),
                "duration_ms": duration_ms,
            }), exc_info=True)
            result = ToolResult(
                success=False,
                result=f"Error: {name} failed unexpectedly: {e}",
                metadata={"error_type": type(e).__name__},
            )

        duration_ms = int((time.time() - start_time) * 1000)
        preview = _truncate(result.result, self._preview_chars)
        logger.info(json.dumps({
            "tool": name,
            "event": "completed",
            "step": step,
            "success": result.success,
            "duration_ms": duration_ms,
            "result": preview,
        }, ensure_ascii=False))

        conversation.add_tool_call_result(name, tool_call_id, result.result, is_error=not result.success)
        self.log_store.add_log(ToolLogEntry(
            step=step,
            tool_name=name,
            tool_call_id=tool_call_id,
            success=result.success,
            arguments=arguments,
            result_preview=preview,
            duration_ms=duration_ms,
            metadata=result.metadata,
        ))
        return result

    def _report_progress(self, name: str, step: int, context: ToolExecutionContext) -> None:
        """Progress before each call: 15% baseline, up to 85% as planned sections get created."""
        if context.on_progress is None:
            return

        percentage = 15
        message = f"Processing {name}..."
        totals = plan_section_totals(context.conversation_state)
        if totals is not None:
            done, total = totals
            percentage = 15 + int(min(done, total) / max(total, 1) * 70)
            if name == "create_section":
                message = f"Creating section {done + 1} of {total}..."
            elif name == "create_lesson":
                message = "Creating lesson..."
            elif name == "plan":
                message = "Planning course..."
            else:
                message = "Processing..."

        update = ProgressUpdate(
            percentage=percentage,
            message=message,
            current_action=name,
            step_number=step,
        )
        try:
            context.on_progress(update)
        except Exception as e:
            logger.warning(f"Progress callback failed at step {step}: {e}")


def create_default_registry(log_store: Optional[ToolLogStore] = None) -> ToolRegistry:
    """Registry with every read, edit and meta tool."""
    return ToolRegistry(
        tools=[*create_read_tools(), *create_edit_tools(), *create_meta_tools()],
        log_store=log_store,
    )
