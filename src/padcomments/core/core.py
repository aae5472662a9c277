from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlparse

from pymongo import AsyncMongoClient

from padcomments.config import Config
from padcomments.core.db import KeyValueStore, MongoKeyValueStore
from padcomments.logging import setup_logging

if TYPE_CHECKING:
    from padcomments.core.modules.alias.service import AliasService
    from padcomments.core.modules.comment.service import CommentService


class Service:
    """Base class for services with direct key-value store access."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    alias: AliasService
    comment: CommentService

    def __init__(self, store: KeyValueStore) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - alias must come before comment
        service_configs = [
            ("alias", "padcomments.core.modules.alias.service", "AliasService"),
            ("comment", "padcomments.core.modules.comment.service", "CommentService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(store)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, key-value store, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    store: KeyValueStore
    services: Services

    def __init__(self, config: Config, store: KeyValueStore | None = None) -> None:
        """Configure logging and wire services to a store; MongoDB is used unless a store is injected."""
        self.config = config
        setup_logging(config.debug)
        self.mongo_client = None
        if store is None:
            self.mongo_client = AsyncMongoClient(config.database_url)
            database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
            store = MongoKeyValueStore(database.get_collection(config.store_collection))
        self.store = store
        self.services = Services(store)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close the MongoDB connection if one was opened."""
        await self.services.stop_all()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
