"""
Document State

Owns the live document, its chunk list and reading cursor, and the
Course -> Lesson -> Section hierarchy built by the agent.
"""

import logging
from typing import Any, Optional
from pydantic import BaseModel, Field

from lesson_agent.config import get_settings
from lesson_agent.exceptions import DuplicateSlugError, NoActiveLessonError, SectionNotFoundError
from lesson_agent.models.chunk import DocumentChunk
from lesson_agent.models.course import Lesson, LessonSection
from lesson_agent.models.document import Document, empty_document
from lesson_agent.utils.chunker import chunk_document, get_chunk, rechunk_document
from lesson_agent.utils.tree_utils import document_to_text


logger = logging.getLogger(__name__)


class ChunkInfo(BaseModel):
    current_index: int
    total_chunks: int
    current_char_count: int
    total_char_count: int


class DocumentState(BaseModel):
    """Live document + chunk cursor + lesson hierarchy. A new state is already chunked."""

    # Document & chunks
    document: Document = Field(default_factory=empty_document)
    chunks: list[DocumentChunk] = Field(default_factory=list)
    current_chunk_index: int = Field(default=0, ge=0)
    chunk_size: int = Field(default_factory=lambda: get_settings().chunk_size, gt=0)

    # Hierarchy (Level 2 lessons, Level 3 sections of the current lesson)
    lessons: list[Lesson] = Field(default_factory=list)
    current_lesson_index: Optional[int] = None
    current_section_index: Optional[int] = None

    def model_post_init(self, __context: Any) -> None:
        if not self.chunks:
            self.chunks = chunk_document(self.document, self.chunk_size)

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def initialize(self, document: Optional[Document] = None) -> None:
        self.replace_document(document if document is not None else empty_document())

    def replace_document(self, document: Document) -> None:
        """Set a new document and rewind the cursor to the first chunk."""
        self.document = document
        self.chunks = rechunk_document(document, self.chunk_size)
        self.current_chunk_index = 0

    def update_document(self, document: Document) -> None:
        """Set an edited document, keeping the cursor where it was when still in range."""
        old_index = self.current_chunk_index
        self.document = document
        self.chunks = rechunk_document(document, self.chunk_size)
        self.current_chunk_index = min(old_index, len(self.chunks) - 1)

    def get_document(self) -> Document:
        return self.document

    def is_empty(self) -> bool:
        return not self.document.content

    def get_document_text(self) -> str:
        return document_to_text(self.document)

    # ------------------------------------------------------------------
    # Chunk navigation
    # ------------------------------------------------------------------

    def get_current_chunk(self) -> Optional[DocumentChunk]:
        return get_chunk(self.chunks, self.current_chunk_index)

    def read_first_chunk(self) -> Optional[DocumentChunk]:
        self.current_chunk_index = 0
        return self.get_current_chunk()

    def read_next_chunk(self) -> Optional[DocumentChunk]:
        """Advance one chunk; None (cursor unchanged) at the last chunk."""
        if self.current_chunk_index < len(self.chunks) - 1:
            self.current_chunk_index += 1
            return self.get_current_chunk()
        return None

    def read_previous_chunk(self) -> Optional[DocumentChunk]:
        """Step back one chunk; None (cursor unchanged) at the first chunk."""
        if self.current_chunk_index > 0:
            self.current_chunk_index -= 1
            return self.get_current_chunk()
        return None

    def get_chunk_info(self) -> ChunkInfo:
        current = self.get_current_chunk()
        return ChunkInfo(
            current_index=self.current_chunk_index,
            total_chunks=len(self.chunks),
            current_char_count=current.character_count if current else 0,
            total_char_count=sum(chunk.character_count for chunk in self.chunks),
        )

    # ------------------------------------------------------------------
    # Lessons (Level 2)
    # ------------------------------------------------------------------

    def create_lesson(self, title: str, slug: str, description: str = "") -> Lesson:
        """Append a lesson and make it the current one."""
        if self.get_lesson_by_slug(slug) is not None:
            raise DuplicateSlugError("lesson", slug)

        lesson = Lesson(
            slug=slug,
            title=title,
            description=description,
            order_index=len(self.lessons),
        )
        self.lessons.append(lesson)
        self.current_lesson_index = len(self.lessons) - 1
        self.current_section_index = None
        logger.info(f"Created lesson {len(self.lessons)}: {slug}")
        return lesson

    def get_current_lesson(self) -> Optional[Lesson]:
        if self.current_lesson_index is None or not 0 <= self.current_lesson_index < len(self.lessons):
            return None
        return self.lessons[self.current_lesson_index]

    def get_lesson_by_slug(self, slug: str) -> Optional[Lesson]:
        for lesson in self.lessons:
            if lesson.slug == slug:
                return lesson
        return None

    def set_current_lesson_by_slug(self, slug: str) -> bool:
        """Point at an existing lesson. Returns False (state unchanged) if not found."""
        for index, lesson in enumerate(self.lessons):
            if lesson.slug == slug:
                if index != self.current_lesson_index:
                    self.current_lesson_index = index
                    self.current_section_index = None
                return True
        return False

    def get_all_lessons(self) -> list[Lesson]:
        return self.lessons

    def has_lessons(self) -> bool:
        return bool(self.lessons)

    def get_lesson_count(self) -> int:
        return len(self.lessons)

    # ------------------------------------------------------------------
    # Sections (Level 3, within the current lesson)
    # ------------------------------------------------------------------

    def _require_current_lesson(self) -> Lesson:
        lesson = self.get_current_lesson()
        if lesson is None:
            raise NoActiveLessonError()
        return lesson

    def create_section(self, title: str, slug: str) -> LessonSection:
        """Append an empty section to the current lesson and make it current."""
        lesson = self._require_current_lesson()
        if lesson.get_section(slug) is not None:
            raise DuplicateSlugError("section", slug)

        section = LessonSection(slug=slug, title=title, order_index=len(lesson.sections))
        lesson.sections.append(section)
        self.current_section_index = len(lesson.sections) - 1
        logger.info(f"Created section {len(lesson.sections)} in lesson {lesson.slug}: {slug}")
        return section

    def get_current_section(self) -> Optional[LessonSection]:
        lesson = self.get_current_lesson()
        if lesson is None or self.current_section_index is None:
            return None
        if not 0 <= self.current_section_index < len(lesson.sections):
            return None
        return lesson.sections[self.current_section_index]

    def get_section_by_slug(self, slug: str) -> Optional[LessonSection]:
        lesson = self.get_current_lesson()
        return lesson.get_section(slug) if lesson else None

    def get_section_document(self, slug: str) -> Document:
        section = self._require_current_lesson().get_section(slug)
        if section is None:
            raise SectionNotFoundError(slug)
        return section.document

    def update_section_document(self, slug: str, document: Document) -> None:
        section = self._require_current_lesson().get_section(slug)
        if section is None:
            raise SectionNotFoundError(slug)
        section.document = document

    def get_all_sections(self) -> list[LessonSection]:
        lesson = self.get_current_lesson()
        return lesson.sections if lesson else []

    def has_sections(self) -> bool:
        return bool(self.get_all_sections())

    def get_section_count(self) -> int:
        return len(self.get_all_sections())

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def restore_snapshot(
        self,
        document: Document,
        lessons: list[Lesson],
        current_lesson_index: Optional[int],
        current_section_index: Optional[int],
    ) -> None:
        """Replace document and hierarchy wholesale (checkpoint restore)."""
        self.replace_document(document)
        self.lessons = lessons
        self.current_lesson_index = current_lesson_index
        self.current_section_index = current_section_index

    def clone(self) -> "DocumentState":
        """Deep copy sharing no references with this instance."""
        return self.model_copy(deep=True)
