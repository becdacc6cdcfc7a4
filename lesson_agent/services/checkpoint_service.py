"""
Checkpoint Service

Save and restore conversation + document state for rollback. Every copy in
either direction is deep, so a stored checkpoint can never be changed
through live state (or the other way round).
"""

import logging
from collections import OrderedDict
from typing import Any, Optional

from lesson_agent.config import get_settings
from lesson_agent.exceptions import CheckpointNotFoundError, ConfigurationError
from lesson_agent.models.checkpoint import Checkpoint
from lesson_agent.state.conversation_state import ConversationState
from lesson_agent.state.document_state import DocumentState


logger = logging.getLogger(__name__)


def create_checkpoint(
    conversation_state: ConversationState,
    document_state: DocumentState,
    metadata: Optional[dict[str, Any]] = None,
) -> Checkpoint:
    """Snapshot both live states into a new checkpoint with a fresh id."""
    snapshot = document_state.clone()
    conversation = conversation_state.clone()

    return Checkpoint(
        conversation_messages=conversation.messages,
        document_snapshot=snapshot.document,
        lessons_snapshot=snapshot.lessons,
        current_lesson_index=snapshot.current_lesson_index,
        current_section_index=snapshot.current_section_index,
        conversation_metadata=conversation.metadata,
        metadata=dict(metadata or {}),
    )


def restore_checkpoint(
    checkpoint: Checkpoint,
    conversation_state: ConversationState,
    document_state: DocumentState,
) -> None:
    """Copy a checkpoint back into the live states; status returns to idle."""
    stored = checkpoint.model_copy(deep=True)

    conversation_state.reset_to(
        messages=list(stored.conversation_messages),
        metadata=stored.conversation_metadata,
        checkpoint_id=checkpoint.id,
    )
    document_state.restore_snapshot(
        document=stored.document_snapshot,
        lessons=list(stored.lessons_snapshot),
        current_lesson_index=stored.current_lesson_index,
        current_section_index=stored.current_section_index,
    )
    logger.info(f"Restored checkpoint {checkpoint.id} ({len(stored.conversation_messages)} messages)")


class CheckpointManager:
    """
    Bounded checkpoint store.

    Keeps at most max_checkpoints entries; saving beyond that evicts the
    oldest by insertion order.
    """

    def __init__(self, max_checkpoints: Optional[int] = None, checkpoint_interval: Optional[int] = None):
        settings = get_settings()
        if max_checkpoints is None:
            max_checkpoints = settings.max_checkpoints
        if checkpoint_interval is None:
            checkpoint_interval = settings.checkpoint_interval
        for key, value in (("max_checkpoints", max_checkpoints), ("checkpoint_interval", checkpoint_interval)):
            if value < 1:
                raise ConfigurationError(key, "must be a positive integer")

        self._max_checkpoints = max_checkpoints
        self._checkpoint_interval = checkpoint_interval
        self._checkpoints: "OrderedDict[str, Checkpoint]" = OrderedDict()

    @property
    def max_checkpoints(self) -> int:
        return self._max_checkpoints

    def save(self, checkpoint: Checkpoint) -> None:
        self._checkpoints[checkpoint.id] = checkpoint
        self._checkpoints.move_to_end(checkpoint.id)
        if len(self._checkpoints) > self._max_checkpoints:
            evicted_id, _ = self._checkpoints.popitem(last=False)
            logger.debug(f"Evicted checkpoint {evicted_id}")

    def get(self, checkpoint_id: str) -> Optional[Checkpoint]:
        return self._checkpoints.get(checkpoint_id)

    def get_latest(self) -> Optional[Checkpoint]:
        """Most recently saved checkpoint (not most recently restored)."""
        if not self._checkpoints:
            return None
        return next(reversed(self._checkpoints.values()))

    def get_all(self) -> list[Checkpoint]:
        return list(self._checkpoints.values())

    def clear(self) -> None:
        self._checkpoints.clear()

    def count(self) -> int:
        return len(self._checkpoints)

    # Orchestrator helpers

    def should_checkpoint(self, step: int) -> bool:
        """True every checkpoint_interval agent steps."""
        return step > 0 and step % self._checkpoint_interval == 0

    def snapshot(
        self,
        conversation_state: ConversationState,
        document_state: DocumentState,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Checkpoint:
        """Create and save a checkpoint, then mark it in the conversation log."""
        checkpoint = create_checkpoint(conversation_state, document_state, metadata)
        self.save(checkpoint)
        conversation_state.add_checkpoint(checkpoint)
        logger.info(f"Saved checkpoint {checkpoint.id} ({self.count()}/{self._max_checkpoints})")
        return checkpoint

    def rollback(
        self,
        conversation_state: ConversationState,
        document_state: DocumentState,
        checkpoint_id: Optional[str] = None,
    ) -> Checkpoint:
        """Restore the given checkpoint, or the latest one when no id is given."""
        checkpoint = self.get(checkpoint_id) if checkpoint_id else self.get_latest()
        if checkpoint is None:
            raise CheckpointNotFoundError(checkpoint_id)

        restore_checkpoint(checkpoint, conversation_state, document_state)
        return checkpoint
