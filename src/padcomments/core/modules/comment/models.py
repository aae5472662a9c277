import math
import re
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from padcomments.core.modules.comment.ids import is_reply_id
from padcomments.utils import now_ms

DEFAULT_AUTHOR = "empty"

# Leading integer of a string, hexadecimal when prefixed with 0x
_LEADING_INT_RE = re.compile(r"\s*([+-]?)(?:0[xX]([0-9a-fA-F]+)|(\d+))")


class Namespace(StrEnum):
    """Storage namespaces; each pad has one aggregate per namespace."""

    COMMENTS = "comments"
    REPLIES = "comment-replies"

    def key(self, pad_id: str) -> str:
        return f"{self.value}:{pad_id}"


class EntryKind(StrEnum):
    COMMENT = "comment"
    REPLY = "reply"

    @property
    def namespace(self) -> Namespace:
        return Namespace.REPLIES if self is EntryKind.REPLY else Namespace.COMMENTS


class EntryRef(BaseModel):
    """Identifier of a comment or reply tagged with the namespace it lives in."""

    model_config = ConfigDict(frozen=True)

    kind: EntryKind
    id: str

    @classmethod
    def parse(cls, entry_id: str) -> Self:
        """Classify a raw identifier by its prefix; unrecognized ids are comments."""
        kind = EntryKind.REPLY if is_reply_id(entry_id) else EntryKind.COMMENT
        return cls(kind=kind, id=entry_id)

    @property
    def namespace(self) -> Namespace:
        return self.kind.namespace


def parse_timestamp(value: Any) -> int | None:
    """Parse the leading integer of a timestamp value, None if there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match is None:
            return None
        sign, hex_digits, digits = match.groups()
        number = int(hex_digits, 16) if hex_digits else int(digits)
        return -number if sign == "-" else number
    return None


def timestamp_or_now(value: Any) -> int:
    # Zero counts as missing
    return parse_timestamp(value) or now_ms()


class AnnotationRecord(BaseModel):
    """Fields shared by stored comments and replies.

    Unknown stored fields are kept as extras.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    author: str = DEFAULT_AUTHOR
    name: str | None = None
    text: str | None = None
    change_to: str | None = Field(None, alias="changeTo")
    change_from: str | None = Field(None, alias="changeFrom")
    timestamp: int = Field(default_factory=now_ms)
    change_accepted: bool | None = Field(None, alias="changeAccepted")
    change_reverted: bool | None = Field(None, alias="changeReverted")

    def to_store(self) -> dict[str, Any]:
        """Serialize for storage with camelCase keys, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Comment(AnnotationRecord):
    """Top-level comment on a pad."""


class CommentReply(AnnotationRecord):
    """Reply to a comment; the parent comment is not checked for existence."""

    comment_id: str | None = Field(None, alias="commentId")

    def to_store(self) -> dict[str, Any]:
        """Serialize for storage; an absent change payload is stored as null."""
        data = super().to_store()
        data["changeTo"] = self.change_to
        data["changeFrom"] = self.change_from
        return data


class CommentInput(BaseModel):
    """Caller-supplied data for a new comment."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    comment_id: str | None = Field(None, alias="commentId")  # Set when copying an existing comment
    author: str | None = None
    name: str | None = None
    text: str | None = None
    change_to: str | None = Field(None, alias="changeTo")
    change_from: str | None = Field(None, alias="changeFrom")
    timestamp: Any = None

    def to_comment(self) -> Comment:
        return Comment(
            author=self.author or DEFAULT_AUTHOR,
            name=self.name,
            text=self.text,
            change_to=self.change_to,
            change_from=self.change_from,
            timestamp=timestamp_or_now(self.timestamp),
        )


class ReplyMetadata(BaseModel):
    """Author details nested under the `comment` key of reply input."""

    model_config = ConfigDict(extra="ignore")

    author: str | None = None
    name: str | None = None


class ReplyInput(BaseModel):
    """Caller-supplied data for a new reply."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    comment_id: str | None = Field(None, alias="commentId")
    reply: str | None = None
    text: str | None = None
    change_to: str | None = Field(None, alias="changeTo")
    change_from: str | None = Field(None, alias="changeFrom")
    author: str | None = None
    name: str | None = None
    timestamp: Any = None
    comment: ReplyMetadata | None = None

    def to_reply(self) -> CommentReply:
        """Apply reply defaults.

        Reply text wins over text, nested metadata wins over top-level author and
        name, empty change payloads become null.
        """
        metadata = self.comment or ReplyMetadata()
        return CommentReply(
            comment_id=self.comment_id,
            text=self.reply or self.text,
            change_to=self.change_to or None,
            change_from=self.change_from or None,
            author=metadata.author or self.author or DEFAULT_AUTHOR,
            name=metadata.name or self.name,
            timestamp=timestamp_or_now(self.timestamp),
        )
