"""Unit tests for lesson_agent/state/document_state.py

Tests document replacement and editing, chunk navigation, and the
lesson/section hierarchy with its current pointers.
"""

import pytest

from lesson_agent.exceptions import DuplicateSlugError, NoActiveLessonError, SectionNotFoundError
from lesson_agent.models.document import Document, paragraph
from lesson_agent.state.document_state import DocumentState


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _doc(*texts: str) -> Document:
    return Document(content=[paragraph(text) for text in texts])


def _state_with_lesson(slug: str = "intro") -> DocumentState:
    state = DocumentState()
    state.create_lesson("Intro", slug, "Getting started")
    return state


# ===========================================================================
# Document
# ===========================================================================

class TestDocument:
    def test_new_state_is_chunked(self):
        state = DocumentState()
        assert state.is_empty()
        assert len(state.chunks) == 1
        assert state.get_current_chunk().total_chunks == 1

    def test_construct_with_document(self):
        state = DocumentState(document=_doc("aaaa", "bbbb"), chunk_size=4)
        assert len(state.chunks) == 2

    def test_chunk_size_from_settings(self, monkeypatch):
        monkeypatch.setenv("LESSON_AGENT_CHUNK_SIZE", "123")
        from lesson_agent.config import reset_settings
        reset_settings()
        assert DocumentState().chunk_size == 123

    def test_replace_rewinds_cursor(self):
        state = DocumentState(document=_doc("aaaa", "bbbb", "cccc"), chunk_size=4)
        state.read_next_chunk()
        state.replace_document(_doc("dddd", "eeee"))
        assert state.current_chunk_index == 0
        assert len(state.chunks) == 2

    def test_update_keeps_cursor_in_range(self):
        state = DocumentState(document=_doc("aaaa", "bbbb"), chunk_size=4)
        state.read_next_chunk()
        state.update_document(_doc("aaaa", "bbbb", "cccc"))
        assert state.current_chunk_index == 1

    def test_update_clamps_cursor(self):
        state = DocumentState(document=_doc("aaaa", "bbbb", "cccc"), chunk_size=4)
        state.read_next_chunk()
        state.read_next_chunk()
        state.update_document(_doc("aaaa"))
        assert state.current_chunk_index == 0

    def test_initialize_defaults_to_empty(self):
        state = DocumentState(document=_doc("text"))
        state.initialize()
        assert state.is_empty()

    def test_document_text(self):
        state = DocumentState(document=_doc("one", "two"))
        assert state.get_document_text() == "one\ntwo"


# ===========================================================================
# Chunk navigation
# ===========================================================================

class TestChunkNavigation:
    def test_walk_forward_and_back(self):
        state = DocumentState(document=_doc("aaaa", "bbbb", "cccc"), chunk_size=4)
        assert state.read_first_chunk().index == 0
        assert state.read_next_chunk().index == 1
        assert state.read_next_chunk().index == 2
        assert state.read_previous_chunk().index == 1

    def test_next_at_end_returns_none(self):
        state = DocumentState(document=_doc("aaaa"))
        assert state.read_next_chunk() is None
        assert state.current_chunk_index == 0

    def test_previous_at_start_returns_none(self):
        state = DocumentState(document=_doc("aaaa"))
        assert state.read_previous_chunk() is None

    def test_chunk_info(self):
        state = DocumentState(document=_doc("aaaa", "bb"), chunk_size=4)
        info = state.get_chunk_info()
        assert info.current_index == 0
        assert info.total_chunks == 2
        assert info.current_char_count == 4
        assert info.total_char_count == 6


# ===========================================================================
# Lessons
# ===========================================================================

class TestLessons:
    def test_create_lesson_becomes_current(self):
        state = DocumentState()
        lesson = state.create_lesson("Basics", "basics")
        assert state.get_current_lesson() is lesson
        assert lesson.order_index == 0
        assert state.has_lessons()

    def test_order_index_follows_creation(self):
        state = DocumentState()
        state.create_lesson("One", "one")
        second = state.create_lesson("Two", "two")
        assert second.order_index == 1
        assert state.get_lesson_count() == 2

    def test_duplicate_slug_rejected(self):
        state = _state_with_lesson("intro")
        with pytest.raises(DuplicateSlugError):
            state.create_lesson("Again", "intro")
        assert state.get_lesson_count() == 1

    def test_new_lesson_resets_section_pointer(self):
        state = _state_with_lesson()
        state.create_section("Part", "part")
        state.create_lesson("Next", "next")
        assert state.current_section_index is None

    def test_set_current_by_slug(self):
        state = DocumentState()
        state.create_lesson("One", "one")
        state.create_lesson("Two", "two")
        assert state.set_current_lesson_by_slug("one") is True
        assert state.get_current_lesson().slug == "one"

    def test_set_current_unknown_slug(self):
        state = _state_with_lesson("intro")
        assert state.set_current_lesson_by_slug("missing") is False
        assert state.get_current_lesson().slug == "intro"

    def test_reselecting_same_lesson_keeps_section(self):
        state = _state_with_lesson("intro")
        state.create_section("Part", "part")
        state.set_current_lesson_by_slug("intro")
        assert state.get_current_section().slug == "part"

    def test_no_current_lesson_initially(self):
        assert DocumentState().get_current_lesson() is None


# ===========================================================================
# Sections
# ===========================================================================

class TestSections:
    def test_create_section_requires_lesson(self):
        with pytest.raises(NoActiveLessonError):
            DocumentState().create_section("Orphan", "orphan")

    def test_create_section(self):
        state = _state_with_lesson()
        section = state.create_section("What is state?", "what-is-state")
        assert state.get_current_section() is section
        assert section.order_index == 0
        assert section.document.content == []

    def test_duplicate_section_slug_rejected(self):
        state = _state_with_lesson()
        state.create_section("A", "a")
        with pytest.raises(DuplicateSlugError):
            state.create_section("A again", "a")

    def test_same_section_slug_in_other_lesson(self):
        state = _state_with_lesson("one")
        state.create_section("A", "a")
        state.create_lesson("Two", "two")
        state.create_section("A", "a")
        assert state.get_section_count() == 1

    def test_update_section_document(self):
        state = _state_with_lesson()
        state.create_section("A", "a")
        state.update_section_document("a", _doc("body"))
        assert state.get_section_document("a").content[0].content[0].text == "body"

    def test_update_unknown_section(self):
        state = _state_with_lesson()
        with pytest.raises(SectionNotFoundError):
            state.update_section_document("missing", _doc("x"))

    def test_sections_scoped_to_current_lesson(self):
        state = _state_with_lesson("one")
        state.create_section("A", "a")
        state.create_lesson("Two", "two")
        assert state.get_section_by_slug("a") is None
        assert not state.has_sections()


# ===========================================================================
# Snapshots
# ===========================================================================

class TestSnapshots:
    def test_clone_is_independent(self):
        state = _state_with_lesson()
        state.create_section("A", "a")
        copy = state.clone()

        copy.lessons[0].sections[0].title = "Changed"
        copy.document.content.append(paragraph("new"))

        assert state.lessons[0].sections[0].title == "A"
        assert state.is_empty()

    def test_restore_snapshot(self):
        state = DocumentState(document=_doc("aaaa", "bbbb"), chunk_size=4)
        state.read_next_chunk()
        other = _state_with_lesson("restored")

        state.restore_snapshot(_doc("x"), other.lessons, 0, None)

        assert state.current_chunk_index == 0
        assert len(state.chunks) == 1
        assert state.get_current_lesson().slug == "restored"
