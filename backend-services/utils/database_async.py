"""
Async database handle using Motor for non-blocking I/O operations.

The handle is constructed explicitly, opened with ``connect()`` during application
startup and released with ``close()`` on shutdown. Nothing connects at import time.

The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, IndexModel

from utils.config_util import AppConfig
from utils.database import InMemoryDB

logger = logging.getLogger('murmur.api')

SECRETS_COLLECTION = 'secrets'


class AsyncDatabase:
    """Async database wrapper that supports both Motor (MongoDB) and in-memory modes."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.memory_only = config.memory_only
        self.client = None
        self.db = None

    @property
    def connected(self) -> bool:
        return self.db is not None

    async def connect(self):
        """Open the client, verify it answers a ping and create indexes."""
        if self.connected:
            return
        if self.memory_only:
            self.db = InMemoryDB(async_mode=True)
            logger.info('Memory-only mode: Using in-memory collections')
            return

        self.client = AsyncIOMotorClient(
            self.config.database_uri,
            serverSelectionTimeoutMS=self.config.db_server_selection_timeout_ms,
            tz_aware=True,
        )
        self.db = self.client.get_default_database(default=self.config.database_name)
        try:
            await self._validate_connection()
            await self.create_indexes()
        except Exception:
            await self.close()
            raise
        logger.info(f'DB connected successfully! (database={self.db.name})')

    async def _validate_connection(self):
        max_retries = self.config.db_connect_retries
        for attempt in range(max_retries):
            try:
                await self.client.admin.command('ping')
                return
            except Exception as e:
                if attempt < max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(
                        f'MongoDB connection attempt {attempt + 1}/{max_retries} failed: {e}'
                    )
                    logger.info(f'Retrying in {wait} seconds...')
                    await asyncio.sleep(wait)
                else:
                    logger.error(f'MongoDB connection failed after {max_retries} attempts')
                    raise RuntimeError(f'Cannot connect to MongoDB: {e}') from e

    async def create_indexes(self):
        """Create database indexes for performance."""
        if self.memory_only:
            logger.debug('Memory-only mode: Skipping MongoDB index creation')
            return
        await self.secrets.create_indexes(
            [
                IndexModel([('key', ASCENDING)]),
                IndexModel([('isDeleted', ASCENDING)]),
            ]
        )

    def get_collection(self, name):
        if not self.connected:
            raise RuntimeError('Database is not connected; call connect() first')
        return self.db.get_collection(name)

    @property
    def secrets(self):
        return self.get_collection(SECRETS_COLLECTION)

    async def ping(self) -> bool:
        if not self.connected:
            return False
        if self.memory_only:
            return True
        try:
            await self.client.admin.command('ping')
            return True
        except Exception as e:
            logger.warning(f'MongoDB ping failed: {e}')
            return False

    def get_mode_info(self) -> dict:
        """Get information about database mode."""
        return {
            'mode': 'memory_only' if self.memory_only else 'mongodb',
            'connected': self.connected,
        }

    async def close(self):
        """Close database connections gracefully."""
        if self.client:
            self.client.close()
            logger.info('MongoDB connections closed')
        self.client = None
        self.db = None
