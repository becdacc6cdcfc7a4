"""Unit tests for lesson_agent/tools/registry.py

Tests the tool boundary: conversation recording, argument parsing, error
conversion, progress reporting, structured logging and the tool log.
"""

import json
import logging

import pytest
from pydantic import BaseModel

from lesson_agent.config import reset_settings
from lesson_agent.models.tool_logs import ToolLogStore
from lesson_agent.tools.base import AgentTool, ToolResult
from lesson_agent.tools.registry import ToolRegistry, create_default_registry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _ExplodingTool(AgentTool):
    name = "explode"
    description = "Always raises."

    def run(self, args, context):
        raise RuntimeError("boom")


class _EchoArgs(BaseModel):
    text: str


class _EchoTool(AgentTool):
    name = "echo"
    description = "Echoes its text."
    args_model = _EchoArgs

    def run(self, args, context):
        return ToolResult(success=True, result=args.text)


def _plan_with_sections(planned=(2, 2), created=(0, 0)) -> dict:
    return {
        "lessons": [
            {"slug": f"lesson-{i}", "planned_section_count": p, "created_section_count": c, "created": True}
            for i, (p, c) in enumerate(zip(planned, created))
        ],
    }


# ===========================================================================
# Registration and definitions
# ===========================================================================

class TestRegistration:
    def test_default_tool_set(self):
        assert sorted(create_default_registry().names()) == sorted([
            "read_first_chunk",
            "read_next_chunk",
            "read_previous_chunk",
            "apply_diff",
            "replace_document",
            "create_lesson",
            "create_section",
            "plan",
            "finish_with_summary",
            "ask_user",
        ])

    def test_definitions_use_camel_case_aliases(self, registry):
        definitions = {d["function"]["name"]: d for d in registry.definitions()}
        parameters = definitions["apply_diff"]["function"]["parameters"]

        assert definitions["apply_diff"]["type"] == "function"
        assert {"beforeContent", "deleteContent", "insertContent", "sectionSlug"} <= set(parameters["properties"])
        assert parameters["required"] == ["insertContent"]
        assert "title" not in parameters

    def test_strict_definitions(self, registry):
        definition = next(d for d in registry.definitions(strict=True) if d["function"]["name"] == "ask_user")
        parameters = definition["function"]["parameters"]
        assert definition["function"]["strict"] is True
        assert parameters["additionalProperties"] is False
        assert parameters["required"] == ["question", "suggestedDefault"]

    def test_no_argument_tools_have_empty_object_schema(self, registry):
        definition = next(d for d in registry.definitions() if d["function"]["name"] == "read_first_chunk")
        assert definition["function"]["parameters"]["type"] == "object"
        assert definition["function"]["parameters"].get("properties", {}) == {}

    def test_register_replaces_same_name(self):
        registry = ToolRegistry(tools=[_EchoTool()])
        registry.register(_EchoTool())
        assert registry.names() == ["echo"]


# ===========================================================================
# execute
# ===========================================================================

class TestExecute:
    def test_records_call_and_result(self, tool_context):
        registry = ToolRegistry(tools=[_EchoTool()])
        registry.execute("echo", {"text": "hi"}, tool_context, tool_call_id="call_abc")

        call, result = tool_context.conversation_state.messages
        assert call.type == "toolCall"
        assert call.tool_call_id == "call_abc"
        assert call.arguments == {"text": "hi"}
        assert result.type == "toolCallResult"
        assert result.result == "hi"
        assert result.is_error is False

    def test_generates_call_id(self, tool_context):
        registry = ToolRegistry(tools=[_EchoTool()])
        registry.execute("echo", {"text": "hi"}, tool_context)
        assert tool_context.conversation_state.messages[0].tool_call_id.startswith("call_")

    def test_json_string_arguments(self, tool_context):
        result = ToolRegistry(tools=[_EchoTool()]).execute("echo", '{"text": "from json"}', tool_context)
        assert result.result == "from json"

    def test_invalid_json(self, tool_context):
        result = ToolRegistry(tools=[_EchoTool()]).execute("echo", "{not json", tool_context)
        assert result.success is False
        assert result.result.startswith("Error: Invalid arguments for echo: arguments are not valid JSON")

    def test_missing_argument(self, tool_context):
        result = ToolRegistry(tools=[_EchoTool()]).execute("echo", {}, tool_context)
        assert result.result == "Error: Invalid arguments for echo: text: Field required"

    def test_unknown_tool(self, tool_context):
        result = ToolRegistry().execute("nope", {}, tool_context)
        assert result.success is False
        assert result.result == "Error: Unknown tool: nope"
        assert tool_context.conversation_state.messages[-1].is_error is True

    def test_unexpected_exception_contained(self, tool_context):
        result = ToolRegistry(tools=[_ExplodingTool()]).execute("explode", {}, tool_context)
        assert result.success is False
        assert result.result == "Error: explode failed unexpectedly: boom"
        assert result.metadata["error_type"] == "RuntimeError"

    def test_counts_steps(self, tool_context):
        registry = ToolRegistry(tools=[_EchoTool()])
        for _ in range(3):
            registry.execute("echo", {"text": "x"}, tool_context)
        assert registry.step_count == 3
        registry.reset_steps()
        assert registry.step_count == 0


# ===========================================================================
# Progress
# ===========================================================================

class TestProgress:
    def test_baseline_without_plan(self, tool_context, mocker):
        tool_context.on_progress = mocker.Mock()
        ToolRegistry(tools=[_EchoTool()]).execute("echo", {"text": "x"}, tool_context)

        update = tool_context.on_progress.call_args[0][0]
        assert update.step == "agent_running"
        assert update.percentage == 15
        assert update.message == "Processing echo..."
        assert update.step_number == 1

    def test_scales_with_created_sections(self, tool_context, mocker):
        tool_context.on_progress = mocker.Mock()
        tool_context.conversation_state.metadata["plan"] = _plan_with_sections(created=(2, 0))

        create_default_registry().execute(
            "create_section", {"lesson_slug": "x", "title": "T", "slug": "t"}, tool_context
        )

        update = tool_context.on_progress.call_args[0][0]
        assert update.percentage == 50
        assert update.message == "Creating section 3 of 4..."

    def test_caps_at_85(self, tool_context, mocker):
        tool_context.on_progress = mocker.Mock()
        tool_context.conversation_state.metadata["plan"] = _plan_with_sections(created=(3, 3))

        ToolRegistry(tools=[_EchoTool()]).execute("echo", {"text": "x"}, tool_context)

        assert tool_context.on_progress.call_args[0][0].percentage == 85

    def test_reported_before_execution(self, tool_context):
        seen = []
        tool_context.on_progress = lambda update: seen.append(len(tool_context.conversation_state.messages))
        ToolRegistry(tools=[_EchoTool()]).execute("echo", {"text": "x"}, tool_context)
        # only the toolCall message exists when progress fires
        assert seen == [1]

    def test_failing_callback_does_not_break_call(self, tool_context, mocker):
        tool_context.on_progress = mocker.Mock(side_effect=RuntimeError("socket closed"))
        result = ToolRegistry(tools=[_EchoTool()]).execute("echo", {"text": "x"}, tool_context)
        assert result.success


# ===========================================================================
# Logging
# ===========================================================================

class TestLogging:
    def test_structured_log_lines(self, tool_context, caplog):
        caplog.set_level(logging.INFO, logger="lesson_agent.tools.registry")
        ToolRegistry(tools=[_EchoTool()]).execute("echo", {"text": "x"}, tool_context)

        events = [json.loads(record.getMessage()) for record in caplog.records
                  if record.name == "lesson_agent.tools.registry"]
        assert [event["event"] for event in events] == ["started", "completed"]
        assert events[1]["success"] is True
        assert events[1]["tool"] == "echo"

    def test_failure_logged_with_traceback(self, tool_context, caplog):
        caplog.set_level(logging.INFO, logger="lesson_agent.tools.registry")
        ToolRegistry(tools=[_ExplodingTool()]).execute("explode", {}, tool_context)

        failed = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(failed) == 1
        assert json.loads(failed[0].getMessage())["event"] == "failed"
        assert failed[0].exc_info is not None

    def test_tool_log_entries(self, tool_context):
        store = ToolLogStore()
        registry = ToolRegistry(tools=[_EchoTool()], log_store=store)
        registry.execute("echo", {"text": "x"}, tool_context, tool_call_id="call_1")
        registry.execute("echo", {}, tool_context, tool_call_id="call_2")

        logs = store.get_logs()
        assert [log.step for log in logs] == [1, 2]
        assert [log.success for log in logs] == [True, False]
        assert logs[0].tool_call_id == "call_1"
        assert store.get_stats()["failed_calls"] == 1

    def test_preview_truncated(self, monkeypatch, tool_context):
        monkeypatch.setenv("LESSON_AGENT_TOOL_LOG_PREVIEW_CHARS", "5")
        reset_settings()
        registry = ToolRegistry(tools=[_EchoTool()])
        result = registry.execute("echo", {"text": "abcdefghij"}, tool_context)

        assert result.result == "abcdefghij"
        assert registry.log_store.get_logs()[0].result_preview == "abcde..."

    @pytest.mark.parametrize("max_logs", [1, 2])
    def test_log_store_bounded_by_settings(self, monkeypatch, tool_context, max_logs):
        monkeypatch.setenv("LESSON_AGENT_MAX_TOOL_LOGS", str(max_logs))
        reset_settings()
        registry = ToolRegistry(tools=[_EchoTool()])
        for i in range(4):
            registry.execute("echo", {"text": str(i)}, tool_context)
        assert [log.result_preview for log in registry.log_store.get_logs()] == [
            str(i) for i in range(4 - max_logs, 4)
        ]
