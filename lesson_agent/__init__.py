"""Lesson agent core: document state, anchored edits, checkpoints and the tool surface."""
