"""Whole-aggregate access to per-pad comment and reply maps.

The store only supports whole-value get/set/remove, so every mutation loads
the full map, changes it in memory and writes it back. There is no
compare-and-swap: overlapping writers on the same pad race and the last save
wins.

Mutations work on the stored dicts as they are; entries are only validated
into records when a caller reads them.
"""

from typing import Any, TypeAlias

from padcomments.core.db import KeyValueStore
from padcomments.core.modules.comment.models import AnnotationRecord, Comment, CommentReply, Namespace

RawAggregate: TypeAlias = dict[str, dict[str, Any]]

RECORD_TYPES: dict[Namespace, type[AnnotationRecord]] = {
    Namespace.COMMENTS: Comment,
    Namespace.REPLIES: CommentReply,
}


class AggregateStore:
    """Loads and saves the comment or reply map of a pad as a single value."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def load(self, namespace: Namespace, pad_id: str) -> RawAggregate:
        """Load the stored map, empty when nothing is stored."""
        value = await self._store.get(namespace.key(pad_id))
        return dict(value) if value else {}

    async def load_records(self, namespace: Namespace, pad_id: str) -> dict[str, AnnotationRecord]:
        record_type = RECORD_TYPES[namespace]
        aggregate = await self.load(namespace, pad_id)
        return {entry_id: record_type.model_validate(data) for entry_id, data in aggregate.items()}

    async def save(self, namespace: Namespace, pad_id: str, aggregate: RawAggregate) -> None:
        """Replace the stored map."""
        await self._store.set(namespace.key(pad_id), aggregate)

    async def remove(self, namespace: Namespace, pad_id: str) -> None:
        await self._store.remove(namespace.key(pad_id))
