"""
Meta Tools

Tools for planning, completion and user interaction, plus the plan
progress bookkeeping shared with the edit tools.
"""

import logging
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from lesson_agent.state.conversation_state import ConversationState
from lesson_agent.tools.base import AgentTool, ToolExecutionContext, ToolResult
from lesson_agent.utils.tree_utils import count_words


logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_ERROR = "Slug must contain only lowercase letters, numbers, and hyphens. No spaces or special characters."


# Plan tracking (stored in conversation metadata under "plan")

def record_plan_progress(
    conversation_state: ConversationState,
    lesson_slug: str,
    section_created: bool = False,
) -> None:
    """Mark a planned lesson as created, or count one more created section."""
    plan = conversation_state.metadata.get("plan")
    if not plan:
        return
    for lesson in plan.get("lessons", []):
        if lesson.get("slug") == lesson_slug:
            if section_created:
                lesson["created_section_count"] = lesson.get("created_section_count", 0) + 1
            else:
                lesson["created"] = True
            return


def plan_section_totals(conversation_state: ConversationState) -> Optional[tuple[int, int]]:
    """(created, planned) section counts, or None when no plan exists."""
    plan = conversation_state.metadata.get("plan")
    if not plan:
        return None
    lessons = plan.get("lessons", [])
    planned = sum(lesson.get("planned_section_count", 0) for lesson in lessons)
    created = sum(lesson.get("created_section_count", 0) for lesson in lessons)
    return created, planned


# Argument models

class PlannedSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(description="Section title")
    slug: str = Field(description="URL-friendly slug for the section")
    topics: list[str] = Field(default_factory=list, description="Key topics to cover in this section")
    interactive_elements: list[str] = Field(
        default_factory=list,
        alias="interactiveElements",
        description="Interactive elements (callouts, code blocks, quizzes)",
    )


class PlannedLesson(BaseModel):
    title: str = Field(description='Lesson title (e.g., "Understanding useState")')
    slug: str = Field(description='URL-friendly slug (e.g., "understanding-usestate")')
    description: str = Field(default="", description="Brief description of what this lesson covers")
    sections: list[PlannedSection] = Field(min_length=1, description="Sections within this lesson")


class PlanArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lessons: list[PlannedLesson] = Field(min_length=1, description="Lessons within the course")
    estimated_duration: int = Field(ge=1, alias="estimatedDuration", description="Estimated total duration in minutes")


class InteractiveElementCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    callouts: Optional[int] = None
    code_blocks: Optional[int] = Field(default=None, alias="codeBlocks")
    quizzes: Optional[int] = None
    flip_cards: Optional[int] = Field(default=None, alias="flipCards")


class FinishWithSummaryArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lesson_title: str = Field(alias="lessonTitle", description='Main course title (e.g., "Mastering React Hooks")')
    lesson_slug: str = Field(alias="lessonSlug", description="URL-friendly course slug")
    description: Optional[str] = Field(default=None, description="Short description (1-2 sentences)")
    summary: str = Field(description="Summary of the content created")
    word_count: Optional[int] = Field(default=None, alias="wordCount", description="Approximate total word count")
    sections_completed: Optional[int] = Field(default=None, alias="sectionsCompleted")
    interactive_elements_added: Optional[InteractiveElementCounts] = Field(
        default=None, alias="interactiveElementsAdded"
    )


class AskUserArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(description="The question to ask the user")
    suggested_default: str = Field(
        alias="suggestedDefault", description="Suggested default answer if the user does not respond"
    )


# Tools

class PlanTool(AgentTool):
    name = "plan"
    description = (
        "Create a structured plan for building the course content. This defines the hierarchy:\n"
        "- Course: the overall topic\n"
        "- Lessons: major topics within the course, shown on the course overview page\n"
        "- Sections: content pages within each lesson\n"
        "Always use this as the FIRST step before creating any content."
    )
    args_model = PlanArgs

    def run(self, args: PlanArgs, context: ToolExecutionContext) -> ToolResult:
        total_sections = sum(len(lesson.sections) for lesson in args.lessons)

        lines = [
            "# Course Plan",
            "",
            f"**Estimated Duration:** {args.estimated_duration} minutes",
            f"**Total Lessons:** {len(args.lessons)}",
            f"**Total Sections:** {total_sections}",
            "",
        ]
        for lesson_number, lesson in enumerate(args.lessons, start=1):
            lines.append(f"## Lesson {lesson_number}: {lesson.title}")
            lines.append(f"**Slug:** {lesson.slug}")
            lines.append(f"**Description:** {lesson.description}")
            lines.append("")
            lines.append("**Sections:**")
            for section_number, section in enumerate(lesson.sections, start=1):
                lines.append(f"  {section_number}. **{section.title}** ({section.slug})")
                lines.append(f"     Topics: {', '.join(section.topics)}")
                lines.append(f"     Interactive: {', '.join(section.interactive_elements)}")
            lines.append("")
        plan_markdown = "\n".join(lines)

        context.conversation_state.metadata["plan"] = {
            "lessons": [
                {
                    "title": lesson.title,
                    "slug": lesson.slug,
                    "description": lesson.description,
                    "planned_section_count": len(lesson.sections),
                    "created_section_count": 0,
                    "created": False,
                }
                for lesson in args.lessons
            ],
            "estimated_duration": args.estimated_duration,
            "markdown": plan_markdown,
        }

        remaining = "\n".join(
            f'- Lesson "{lesson.slug}" ({len(lesson.sections)} sections)' for lesson in args.lessons
        )
        result = (
            f"Plan created with {len(args.lessons)} lessons and {total_sections} sections.\n\n"
            f"{plan_markdown}\n"
            f"## Current State\n"
            f"- Lessons: 0/{len(args.lessons)} created\n"
            f"- Sections: 0/{total_sections} created\n\n"
            f"## Next Steps\n"
            f'Create lesson "{args.lessons[0].slug}" using create_lesson\n\n'
            f"## Remaining\n{remaining}"
        )
        return ToolResult(
            success=True,
            result=result,
            metadata={"lesson_count": len(args.lessons), "section_count": total_sections},
        )


class FinishWithSummaryTool(AgentTool):
    name = "finish_with_summary"
    description = (
        "Mark the course creation as complete and provide course metadata and a summary. "
        "Use this as the final step after building all content."
    )
    args_model = FinishWithSummaryArgs
    is_final = True

    def run(self, args: FinishWithSummaryArgs, context: ToolExecutionContext) -> ToolResult:
        if not SLUG_PATTERN.match(args.lesson_slug):
            return ToolResult(success=False, result=f"Error: lessonSlug is invalid. {SLUG_ERROR}")

        document_state = context.document_state
        empty_lessons = [lesson for lesson in document_state.get_all_lessons() if not lesson.sections]
        if empty_lessons:
            plan = context.conversation_state.metadata.get("plan") or {}
            planned = {lesson["slug"]: lesson.get("planned_section_count") for lesson in plan.get("lessons", [])}
            details = "\n".join(
                f'- "{lesson.slug}": 0/{planned.get(lesson.slug) or "?"} sections' for lesson in empty_lessons
            )
            return ToolResult(
                success=False,
                result=(
                    f"Error: Cannot finish - {len(empty_lessons)} lesson(s) have 0 sections:\n{details}\n\n"
                    "## Action Required\n"
                    "Create sections for each empty lesson using create_section with the appropriate lesson_slug.\n\n"
                    f'Example: create_section with lesson_slug="{empty_lessons[0].slug}"'
                ),
            )

        word_count = args.word_count
        if word_count is None:
            word_count = count_words(document_state.get_document()) + sum(
                count_words(section.document)
                for lesson in document_state.get_all_lessons()
                for section in lesson.sections
            )
        sections_completed = args.sections_completed
        if sections_completed is None:
            sections_completed = sum(len(lesson.sections) for lesson in document_state.get_all_lessons())

        lines = [
            "# Lesson Creation Complete",
            "",
            f"**Title:** {args.lesson_title}",
            f"**Slug:** {args.lesson_slug}",
            "",
            args.summary,
            "",
            "**Statistics:**",
        ]
        if word_count:
            lines.append(f"- Word Count: ~{word_count}")
        if sections_completed:
            lines.append(f"- Sections: {sections_completed}")
        elements = args.interactive_elements_added
        if elements:
            for label, count in (
                ("Callouts", elements.callouts),
                ("Code Blocks", elements.code_blocks),
                ("Quizzes", elements.quizzes),
                ("Flip Cards", elements.flip_cards),
            ):
                if count:
                    lines.append(f"- {label}: {count}")

        metadata = context.conversation_state.metadata
        metadata["lesson_title"] = args.lesson_title
        metadata["lesson_slug"] = args.lesson_slug
        metadata["description"] = args.description or args.summary
        metadata["summary"] = args.summary
        metadata["final_summary"] = {
            "summary": args.summary,
            "word_count": word_count,
            "sections_completed": sections_completed,
            "interactive_elements": elements.model_dump(exclude_none=True) if elements else {},
        }
        logger.info(f"Course complete: {args.lesson_slug} ({sections_completed} sections, ~{word_count} words)")

        return ToolResult(
            success=True,
            result="\n".join(lines),
            metadata={"word_count": word_count, "sections_completed": sections_completed, "completed": True},
        )


class AskUserTool(AgentTool):
    name = "ask_user"
    description = (
        "Ask the user a clarifying question if the requirements are unclear. "
        "The suggested default is used when no answer is available."
    )
    args_model = AskUserArgs

    def run(self, args: AskUserArgs, context: ToolExecutionContext) -> ToolResult:
        return ToolResult(
            success=True,
            result=f'Question noted: "{args.question}". Using default: "{args.suggested_default}"',
            metadata={"question": args.question, "answer": args.suggested_default},
        )


def create_meta_tools() -> list[AgentTool]:
    return [PlanTool(), FinishWithSummaryTool(), AskUserTool()]
