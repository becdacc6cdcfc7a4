"""
Custom Exception Hierarchy for the Lesson Agent Core

Exception Hierarchy:
    LessonAgentError (base)
    ├── DocumentError
    │   └── DocumentValidationError
    ├── HierarchyError
    │   ├── NoActiveLessonError
    │   ├── LessonNotFoundError
    │   ├── SectionNotFoundError
    │   └── DuplicateSlugError
    ├── StateError
    │   └── StateValidationError
    ├── CheckpointError
    │   └── CheckpointNotFoundError
    ├── ToolError
    │   ├── ToolNotFoundError
    │   └── ToolArgumentError
    └── ConfigurationError
"""

from typing import Optional


class LessonAgentError(Exception):
    """Base exception for all lesson agent errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Document Errors

class DocumentError(LessonAgentError):
    """Base exception for document structure errors."""
    pass


class DocumentValidationError(DocumentError):
    """Raised when a document fails structural validation."""

    def __init__(self, errors: list[str]):
        message = "Document validation failed"
        if errors:
            message += f": {', '.join(errors)}"
        super().__init__(message)
        self.errors = errors


# Hierarchy Errors

class HierarchyError(LessonAgentError):
    """Base exception for Course -> Lesson -> Section hierarchy errors."""
    pass


class NoActiveLessonError(HierarchyError):
    """Raised when a section operation runs without a current lesson."""

    def __init__(self):
        super().__init__("No active lesson. Create a lesson first using create_lesson.")


class LessonNotFoundError(HierarchyError):
    """Raised when a lesson slug does not exist."""

    def __init__(self, slug: str):
        super().__init__(f'Lesson "{slug}" does not exist. Create it first using create_lesson.')
        self.slug = slug


class SectionNotFoundError(HierarchyError):
    """Raised when a section slug does not exist in the current lesson."""

    def __init__(self, slug: str):
        super().__init__(f"Section not found: {slug}")
        self.slug = slug


class DuplicateSlugError(HierarchyError):
    """Raised when a lesson or section slug is already taken in its scope."""

    def __init__(self, kind: str, slug: str):
        scope = "the current lesson" if kind == "section" else "this course"
        message = f'A {kind} with slug "{slug}" already exists in {scope}. Choose a different slug.'
        super().__init__(message)
        self.kind = kind
        self.slug = slug


# State Errors

class StateError(LessonAgentError):
    """Base exception for state management errors."""
    pass


class StateValidationError(StateError):
    """Raised when state data fails validation."""

    def __init__(self, field: str, reason: str):
        message = f"State validation failed for '{field}': {reason}"
        super().__init__(message)
        self.field = field
        self.reason = reason


# Checkpoint Errors

class CheckpointError(LessonAgentError):
    """Base exception for checkpoint errors."""
    pass


class CheckpointNotFoundError(CheckpointError):
    """Raised when a checkpoint is not (or no longer) stored."""

    def __init__(self, checkpoint_id: Optional[str] = None):
        if checkpoint_id:
            message = f"Checkpoint not found: {checkpoint_id}"
        else:
            message = "No checkpoints available"
        super().__init__(message)
        self.checkpoint_id = checkpoint_id


# Tool Errors

class ToolError(LessonAgentError):
    """Base exception for tool registry errors."""
    pass


class ToolNotFoundError(ToolError):
    """Raised when a tool name is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ToolArgumentError(ToolError):
    """Raised when tool arguments cannot be parsed or validated."""

    def __init__(self, tool_name: str, reason: str):
        super().__init__(f"Invalid arguments for {tool_name}: {reason}")
        self.tool_name = tool_name
        self.reason = reason


# Configuration Errors

class ConfigurationError(LessonAgentError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, reason: str):
        message = f"Configuration error for '{config_key}': {reason}"
        super().__init__(message)
        self.config_key = config_key
        self.reason = reason
