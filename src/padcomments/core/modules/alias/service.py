import structlog

from padcomments.core.core import Service
from padcomments.core.modules.alias.models import READ_ONLY_PREFIX, PadIds
from padcomments.errors import NotFoundError
from padcomments.utils import random_string

logger = structlog.get_logger(__name__)


class AliasService(Service):
    """Maps read-only pad aliases to canonical pad ids and back."""

    async def resolve(self, handle: str) -> PadIds:
        """Resolve a pad handle, possibly read-only, to its canonical ids."""
        if handle.startswith(READ_ONLY_PREFIX):
            pad_id = await self.store.get(f"readonly2pad:{handle}")
            if pad_id is None:
                raise NotFoundError(f"Read-only pad '{handle}' not found")
            return PadIds(pad_id=pad_id, read_only_pad_id=handle, read_only=True)

        read_only_pad_id = await self.get_read_only_id(handle)
        return PadIds(pad_id=handle, read_only_pad_id=read_only_pad_id, read_only=False)

    async def get_read_only_id(self, pad_id: str) -> str:
        """Get the read-only alias of a pad, creating it on first use."""
        read_only_pad_id = await self.store.get(f"pad2readonly:{pad_id}")
        if read_only_pad_id is None:
            read_only_pad_id = READ_ONLY_PREFIX + random_string(16)
            await self.store.set(f"pad2readonly:{pad_id}", read_only_pad_id)
            await self.store.set(f"readonly2pad:{read_only_pad_id}", pad_id)
            logger.debug("read_only_alias_created", pad_id=pad_id, read_only_pad_id=read_only_pad_id)
        return str(read_only_pad_id)
