"""Identifier generation and namespace routing for comments and replies."""

from padcomments.utils import random_string

COMMENT_ID_PREFIX = "c-"
REPLY_ID_PREFIX = "c-reply"
ID_RANDOM_LENGTH = 16


def generate_comment_id() -> str:
    return COMMENT_ID_PREFIX + random_string(ID_RANDOM_LENGTH)


def generate_reply_id() -> str:
    return f"{REPLY_ID_PREFIX}-{random_string(ID_RANDOM_LENGTH)}"


def is_reply_id(entry_id: str) -> bool:
    """Reply ids are recognized by prefix only; anything else is a comment id."""
    return entry_id[: len(REPLY_ID_PREFIX)] == REPLY_ID_PREFIX
