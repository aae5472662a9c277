"""Shared pytest fixtures."""

import copy
from typing import Any

import pytest

from padcomments.config import Config
from padcomments.core.core import Core


class RecordingStore:
    """In-memory key-value store that records every call.

    Values are deep-copied in and out, like a serializing backend would.
    """

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.calls: list[tuple[str, str]] = []

    async def get(self, key: str) -> Any | None:
        self.calls.append(("get", key))
        return copy.deepcopy(self.data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self.calls.append(("set", key))
        self.data[key] = copy.deepcopy(value)

    async def remove(self, key: str) -> None:
        self.calls.append(("remove", key))
        self.data.pop(key, None)

    def count(self, op: str, key: str) -> int:
        return sum(1 for call in self.calls if call == (op, key))

    def reset_calls(self) -> None:
        self.calls.clear()


@pytest.fixture
def store():
    """Create an empty recording store."""
    return RecordingStore()


@pytest.fixture
def core(store):
    """Create a core wired to the recording store instead of MongoDB."""
    return Core(Config(database_url="mongodb://localhost:27017/test"), store=store)


@pytest.fixture
def comment_service(core):
    return core.services.comment


@pytest.fixture
def alias_service(core):
    return core.services.alias
