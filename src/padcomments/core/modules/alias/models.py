"""Pad identity models."""

from pydantic import BaseModel

READ_ONLY_PREFIX = "r."


class PadIds(BaseModel):
    """Canonical identity of a pad, resolved from any handle.

    Callers needing the writable pad id must use pad_id rather than the
    handle they passed in, which may be a read-only alias.
    """

    pad_id: str
    read_only_pad_id: str
    read_only: bool  # Whether the resolved handle was a read-only alias
