import copy
from collections.abc import Mapping, Sequence
from typing import Any, Literal, TypeAlias, cast

import structlog

from padcomments.core.core import Service
from padcomments.core.db import KeyValueStore
from padcomments.core.modules.alias.models import PadIds
from padcomments.core.modules.comment.aggregate import AggregateStore
from padcomments.core.modules.comment.ids import generate_comment_id, generate_reply_id
from padcomments.core.modules.comment.models import (
    Comment,
    CommentInput,
    CommentReply,
    EntryRef,
    Namespace,
    ReplyInput,
)

logger = structlog.get_logger(__name__)

CommentData: TypeAlias = CommentInput | Mapping[str, Any]
ReplyData: TypeAlias = ReplyInput | Mapping[str, Any]


class CommentService(Service):
    """Manages comments and replies of a pad as whole per-pad aggregates.

    Every mutation resolves the pad handle, loads the affected aggregate once,
    changes it in memory and saves it back once. Nothing is locked, so
    concurrent mutations of the same pad may lose updates.
    """

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store)
        self._aggregates = AggregateStore(store)

    async def _resolve(self, pad: str) -> PadIds:
        return await self.core.services.alias.resolve(pad)

    # Comments

    async def get_comments(self, pad: str) -> dict[str, Comment]:
        """Get all comments of a pad, empty if it has none."""
        pad_ids = await self._resolve(pad)
        comments = await self._aggregates.load_records(Namespace.COMMENTS, pad_ids.pad_id)
        return cast(dict[str, Comment], comments)

    async def delete_comment(self, pad: str, comment_id: str) -> PadIds:
        """Delete a comment; deleting an unknown comment is a no-op."""
        pad_ids = await self._resolve(pad)
        comments = await self._aggregates.load(Namespace.COMMENTS, pad_ids.pad_id)
        comments.pop(comment_id, None)
        await self._aggregates.save(Namespace.COMMENTS, pad_ids.pad_id, comments)
        logger.debug("comment_deleted", pad_id=pad_ids.pad_id, comment_id=comment_id)
        return pad_ids

    async def delete_comments(self, pad: str) -> None:
        """Remove the whole comment aggregate of a pad."""
        pad_ids = await self._resolve(pad)
        await self._aggregates.remove(Namespace.COMMENTS, pad_ids.pad_id)

    async def add_comment(self, pad: str, data: CommentData) -> tuple[PadIds, str, Comment]:
        pad_ids, comment_ids, comments = await self.bulk_add_comments(pad, [data])
        return pad_ids, comment_ids[0], comments[0]

    async def bulk_add_comments(
        self, pad: str, data: Sequence[CommentData]
    ) -> tuple[PadIds, list[str], list[Comment]]:
        """Add comments in input order with a single load and save of the aggregate.

        A comment copied from another pad keeps its commentId; all others get a
        fresh id.
        """
        pad_ids = await self._resolve(pad)
        comments = await self._aggregates.load(Namespace.COMMENTS, pad_ids.pad_id)

        comment_ids: list[str] = []
        new_comments: list[Comment] = []
        for item in data:
            comment_input = item if isinstance(item, CommentInput) else CommentInput.model_validate(item)
            comment_id = comment_input.comment_id or generate_comment_id()
            comment = comment_input.to_comment()
            comments[comment_id] = comment.to_store()
            comment_ids.append(comment_id)
            new_comments.append(comment)

        await self._aggregates.save(Namespace.COMMENTS, pad_ids.pad_id, comments)
        logger.debug("comments_added", pad_id=pad_ids.pad_id, count=len(comment_ids))
        return pad_ids, comment_ids, new_comments

    async def copy_comments(self, source_pad_id: str, dest_pad_id: str) -> None:
        """Copy all comments to another pad; pad ids are used as given, unresolved."""
        await self._copy(Namespace.COMMENTS, source_pad_id, dest_pad_id)

    # Replies

    async def get_comment_replies(self, pad: str) -> dict[str, CommentReply]:
        """Get all comment replies of a pad, empty if it has none."""
        pad_ids = await self._resolve(pad)
        replies = await self._aggregates.load_records(Namespace.REPLIES, pad_ids.pad_id)
        return cast(dict[str, CommentReply], replies)

    async def delete_comment_replies(self, pad: str) -> None:
        """Remove the whole reply aggregate of a pad."""
        pad_ids = await self._resolve(pad)
        await self._aggregates.remove(Namespace.REPLIES, pad_ids.pad_id)

    async def add_comment_reply(self, pad: str, data: ReplyData) -> tuple[PadIds, str, CommentReply]:
        pad_ids, reply_ids, replies = await self.bulk_add_comment_replies(pad, [data])
        return pad_ids, reply_ids[0], replies[0]

    async def bulk_add_comment_replies(
        self, pad: str, data: Sequence[ReplyData]
    ) -> tuple[PadIds, list[str], list[CommentReply]]:
        """Add replies in input order with a single load and save; reply ids are always new."""
        pad_ids = await self._resolve(pad)
        replies = await self._aggregates.load(Namespace.REPLIES, pad_ids.pad_id)

        reply_ids: list[str] = []
        new_replies: list[CommentReply] = []
        for item in data:
            reply_input = item if isinstance(item, ReplyInput) else ReplyInput.model_validate(item)
            reply_id = generate_reply_id()
            reply = reply_input.to_reply()
            replies[reply_id] = reply.to_store()
            reply_ids.append(reply_id)
            new_replies.append(reply)

        await self._aggregates.save(Namespace.REPLIES, pad_ids.pad_id, replies)
        logger.debug("comment_replies_added", pad_id=pad_ids.pad_id, count=len(reply_ids))
        return pad_ids, reply_ids, new_replies

    async def copy_comment_replies(self, source_pad_id: str, dest_pad_id: str) -> None:
        """Copy all replies to another pad; pad ids are used as given, unresolved."""
        await self._copy(Namespace.REPLIES, source_pad_id, dest_pad_id)

    # Entry edits, routed to comments or replies by identifier

    async def change_accepted_state(self, pad: str, entry_id: str, accept: bool) -> PadIds:
        """Mark the change proposed by a comment or reply as accepted or reverted.

        Raises KeyError if the entry does not exist.
        """
        pad_ids = await self._resolve(pad)
        ref = EntryRef.parse(entry_id)
        entries = await self._aggregates.load(ref.namespace, pad_ids.pad_id)
        entry = entries[ref.id]
        entry["changeAccepted"] = accept
        entry["changeReverted"] = not accept
        await self._aggregates.save(ref.namespace, pad_ids.pad_id, entries)
        logger.debug("change_state_updated", pad_id=pad_ids.pad_id, entry_id=entry_id, accepted=accept)
        return pad_ids

    async def change_comment_text(
        self, pad: str, entry_id: str, text: str
    ) -> tuple[PadIds, Literal[True] | None]:
        """Replace the text of a comment or reply.

        Empty text changes nothing and returns True as the second element
        without loading or saving any aggregate; a performed edit returns None.
        Resolving a pad seen for the first time still stores its read-only
        alias. Raises KeyError if the entry does not exist.
        """
        pad_ids = await self._resolve(pad)
        if not text:
            return pad_ids, True

        ref = EntryRef.parse(entry_id)
        entries = await self._aggregates.load(ref.namespace, pad_ids.pad_id)
        entries[ref.id]["text"] = text
        await self._aggregates.save(ref.namespace, pad_ids.pad_id, entries)
        logger.debug("entry_text_changed", pad_id=pad_ids.pad_id, entry_id=entry_id)
        return pad_ids, None

    # Pad lifecycle

    async def delete_pad_annotations(self, pad: str) -> None:
        """Remove all comments and replies of a deleted pad."""
        await self.delete_comments(pad)
        await self.delete_comment_replies(pad)

    async def copy_pad_annotations(self, source_pad_id: str, dest_pad_id: str) -> None:
        """Copy all comments and replies of a duplicated pad."""
        await self.copy_comments(source_pad_id, dest_pad_id)
        await self.copy_comment_replies(source_pad_id, dest_pad_id)

    async def _copy(self, namespace: Namespace, source_pad_id: str, dest_pad_id: str) -> None:
        copied = copy.deepcopy(await self._aggregates.load(namespace, source_pad_id))
        await self._aggregates.save(namespace, dest_pad_id, copied)
        logger.debug("aggregate_copied", namespace=namespace, source=source_pad_id, dest=dest_pad_id, count=len(copied))
