"""
Course Hierarchy Models

Level 2 (Lesson) and Level 3 (LessonSection) of the Course -> Lesson -> Section tree.
"""

from pydantic import BaseModel, Field

from lesson_agent.models.document import Document, empty_document


class LessonSection(BaseModel):
    """A navigable content page inside a lesson."""

    slug: str = Field(description="Unique within its lesson")
    title: str = Field(description="Section title")
    order_index: int = Field(ge=0, description="Position within the lesson")
    document: Document = Field(default_factory=empty_document, description="Section content tree")


class Lesson(BaseModel):
    """A lesson shown on the course overview page."""

    slug: str = Field(description="Unique within the course")
    title: str = Field(description="Lesson title")
    description: str = Field(default="", description="What the lesson covers")
    order_index: int = Field(ge=0, description="Position within the course")
    sections: list[LessonSection] = Field(default_factory=list)

    def get_section(self, slug: str):
        for section in self.sections:
            if section.slug == slug:
                return section
        return None
