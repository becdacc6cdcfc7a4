"""
Edit Tools

Tools that change the document or the lesson hierarchy. Every edit is
validated before it is committed to state; a rejected edit leaves state
untouched.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lesson_agent.exceptions import DocumentValidationError, DuplicateSlugError, LessonNotFoundError
from lesson_agent.models.document import Document, parse_document
from lesson_agent.tools.base import AgentTool, ToolExecutionContext, ToolResult
from lesson_agent.tools.meta_tools import SLUG_ERROR, SLUG_PATTERN, record_plan_progress
from lesson_agent.utils.diff_applier import DeleteScope, apply_diff, sanitize_document, validate_document


logger = logging.getLogger(__name__)


class ApplyDiffArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    before_content: Optional[str] = Field(
        default=None,
        alias="beforeContent",
        description=(
            "Text content that appears right before where you want to insert. "
            "Leave empty to append to the end of the document."
        ),
    )
    delete_content: Optional[str] = Field(
        default=None,
        alias="deleteContent",
        description="Text content of the block(s) to delete. Leave empty if only inserting.",
    )
    insert_content: list[dict[str, Any]] = Field(
        alias="insertContent",
        description="Array of document nodes to insert (paragraphs, headings, callouts, ...)",
    )
    section_slug: Optional[str] = Field(
        default=None,
        alias="sectionSlug",
        description="Slug of a section in the current lesson to edit instead of the main document",
    )
    delete_scope: DeleteScope = Field(
        default=DeleteScope.ALL_MATCHES,
        alias="deleteScope",
        description="Delete every block containing deleteContent, or only the first one at or after the anchor",
    )


class ReplaceDocumentArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_document: dict[str, Any] = Field(
        alias="newDocument",
        description='Complete document to replace the current one. Must have type "doc" and a content array.',
    )


class CreateLessonArgs(BaseModel):
    title: str = Field(description='Lesson title (e.g., "Understanding useState")')
    slug: str = Field(description='URL-friendly slug (e.g., "understanding-usestate")')
    description: str = Field(default="", description="Brief description of what this lesson covers")


class CreateSectionArgs(BaseModel):
    lesson_slug: str = Field(description="Slug of the lesson this section belongs to")
    title: str = Field(description='Section title (e.g., "What is useState?")')
    slug: str = Field(description='URL-friendly slug (e.g., "what-is-usestate")')
    content: str = Field(default="", description="Section body in extended Markdown")


def _require_valid(document: Any) -> None:
    report = validate_document(document)
    if not report.valid:
        raise DocumentValidationError(report.errors)


class ApplyDiffTool(AgentTool):
    name = "apply_diff"
    description = (
        "Apply a surgical edit to the document. Locate the position with beforeContent "
        "(text that appears right before the insertion point), optionally remove the "
        "block(s) containing deleteContent, and insert new nodes. Use this for targeted "
        "changes instead of replacing the whole document."
    )
    args_model = ApplyDiffArgs

    def run(self, args: ApplyDiffArgs, context: ToolExecutionContext) -> ToolResult:
        document_state = context.document_state
        if args.section_slug:
            target = document_state.get_section_document(args.section_slug)
        else:
            target = document_state.get_document()

        diff = apply_diff(
            target,
            args.before_content,
            args.delete_content,
            args.insert_content,
            delete_scope=args.delete_scope,
        )
        if not diff.success:
            return ToolResult(success=False, result=diff.message)

        _require_valid(diff.document)

        if args.section_slug:
            document_state.update_section_document(args.section_slug, diff.document)
        else:
            document_state.update_document(diff.document)

        return ToolResult(
            success=True,
            result=diff.message,
            metadata={
                "nodes_inserted": diff.nodes_inserted,
                "nodes_deleted": diff.nodes_deleted,
                "section_slug": args.section_slug,
                "total_nodes": len(diff.document.content),
            },
        )


class ReplaceDocumentTool(AgentTool):
    name = "replace_document"
    description = (
        "Replace the entire document with new content. "
        "Use this when starting from scratch or making wholesale changes."
    )
    args_model = ReplaceDocumentArgs

    def run(self, args: ReplaceDocumentArgs, context: ToolExecutionContext) -> ToolResult:
        _require_valid(args.new_document)

        try:
            document = parse_document(args.new_document)
        except ValidationError as e:
            raise DocumentValidationError([error["msg"] for error in e.errors()[:5]]) from e

        context.document_state.replace_document(document)
        node_count = len(document.content)
        return ToolResult(
            success=True,
            result=f"Document replaced successfully with {node_count} top-level node(s)",
            metadata={"node_count": node_count, "chunk_count": len(context.document_state.chunks)},
        )


class CreateLessonTool(AgentTool):
    name = "create_lesson"
    description = (
        "Create a new lesson within the course. Lessons are shown on the course overview "
        "page and hold sections. Call this before creating sections for the lesson."
    )
    args_model = CreateLessonArgs

    def run(self, args: CreateLessonArgs, context: ToolExecutionContext) -> ToolResult:
        if not SLUG_PATTERN.match(args.slug):
            return ToolResult(success=False, result=f"Error: Invalid slug format. {SLUG_ERROR}")

        document_state = context.document_state
        document_state.create_lesson(args.title, args.slug, args.description)
        record_plan_progress(context.conversation_state, args.slug)

        lesson_number = document_state.get_lesson_count()
        return ToolResult(
            success=True,
            result=(
                f'✓ Lesson {lesson_number} created: "{args.title}" (slug: {args.slug})\n\n'
                f'Next: create sections for this lesson using create_section with lesson_slug="{args.slug}"'
            ),
            metadata={"lesson_slug": args.slug, "lesson_number": lesson_number},
        )


class CreateSectionTool(AgentTool):
    name = "create_section"
    description = (
        "Create a new section within a lesson. The content is written in extended Markdown "
        "and converted to document nodes."
    )
    args_model = CreateSectionArgs

    def run(self, args: CreateSectionArgs, context: ToolExecutionContext) -> ToolResult:
        document_state = context.document_state
        if not SLUG_PATTERN.match(args.slug):
            return ToolResult(success=False, result=f"Error: Invalid slug format. {SLUG_ERROR}")
        lesson = document_state.get_lesson_by_slug(args.lesson_slug)
        if lesson is None:
            raise LessonNotFoundError(args.lesson_slug)
        if lesson.get_section(args.slug) is not None:
            raise DuplicateSlugError("section", args.slug)

        # Pointers move only once every check has passed.
        document_state.set_current_lesson_by_slug(args.lesson_slug)
        document_state.create_section(args.title, args.slug)
        record_plan_progress(context.conversation_state, args.lesson_slug, section_created=True)
        section_number = document_state.get_section_count()

        document, problem = self._parse_content(args.content, context)
        if document is not None:
            document_state.update_section_document(args.slug, document)

        node_count = len(document.content) if document is not None else 0
        result = (
            f'✓ Section {section_number} created in lesson "{args.lesson_slug}": '
            f'"{args.title}" (slug: {args.slug}) with {node_count} content block(s)'
        )
        if problem:
            result += f"\n\nWarning: {problem}. The section was created empty; fill it with apply_diff."

        return ToolResult(
            success=True,
            result=result,
            metadata={
                "lesson_slug": args.lesson_slug,
                "section_slug": args.slug,
                "section_number": section_number,
                "node_count": node_count,
                "parse_degraded": problem is not None,
            },
        )

    def _parse_content(
        self,
        content: str,
        context: ToolExecutionContext,
    ) -> tuple[Optional[Document], Optional[str]]:
        """Markdown -> Document. Returns (None, reason) when the content cannot be used."""
        if not content.strip():
            return None, None
        if context.markdown_parser is None:
            return None, "No Markdown parser is configured, content was not converted"

        try:
            raw = context.markdown_parser(content)
        except Exception as e:
            logger.warning(f"Markdown parsing failed: {e}")
            return None, f"Markdown parsing failed ({e})"

        if isinstance(raw, Document):
            raw = raw.to_wire()
        raw = sanitize_document(raw)

        report = validate_document(raw)
        if not report.valid:
            logger.warning(f"Parsed section content is invalid: {report.errors}")
            return None, f"Parsed content is invalid ({'; '.join(report.errors)})"

        try:
            return parse_document(raw), None
        except ValidationError as e:
            logger.warning(f"Parsed section content rejected: {e.error_count()} error(s)")
            return None, f"Parsed content is invalid ({e.errors()[0]['msg']})"


def create_edit_tools() -> list[AgentTool]:
    return [ApplyDiffTool(), ReplaceDocumentTool(), CreateLessonTool(), CreateSectionTool()]
