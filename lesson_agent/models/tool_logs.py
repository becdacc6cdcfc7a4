"""
Tool Logging Models

In-memory storage for capturing tool execution logs.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ToolLogEntry(BaseModel):
    """Single tool execution log entry."""

    timestamp: datetime = Field(default_factory=datetime.utcnow)
    step: int
    tool_name: str
    tool_call_id: Optional[str] = None
    success: bool
    arguments: Any = None
    result_preview: str = ""
    duration_ms: Optional[int] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ToolLogStore:
    """Bounded in-memory tool log; the oldest entries drop off first."""

    def __init__(self, max_logs: int = 200):
        self._logs: list[ToolLogEntry] = []
        self._max_logs = max_logs

    def add_log(self, entry: ToolLogEntry) -> None:
        self._logs.append(entry)
        if len(self._logs) > self._max_logs:
            self._logs = self._logs[-self._max_logs:]

    def get_logs(
        self,
        tool_name: Optional[str] = None,
        success: Optional[bool] = None,
    ) -> list[ToolLogEntry]:
        logs = self._logs
        if tool_name:
            logs = [log for log in logs if log.tool_name == tool_name]
        if success is not None:
            logs = [log for log in logs if log.success == success]
        return list(logs)

    def get_recent_logs(self, limit: int = 50) -> list[ToolLogEntry]:
        return self._logs[-limit:] if self._logs else []

    def clear(self) -> None:
        self._logs = []

    def get_stats(self) -> dict[str, int]:
        failures = sum(1 for log in self._logs if not log.success)
        return {
            "total_logs": len(self._logs),
            "failed_calls": failures,
            "max_logs": self._max_logs,
        }
