"""
Pytest configuration for backend-services tests.

Ensures the backend-services directory is on sys.path so imports like
`from utils...` resolve correctly when tests run from the repo root in CI,
forces memory-only storage, and gives every test a fresh database.
"""

# External imports
import os
import sys
import tempfile

os.environ['MEM_OR_EXTERNAL'] = 'MEM'
os.environ.setdefault('ENV', 'development')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('LOGS_DIR', os.path.join(tempfile.gettempdir(), 'murmur-test-logs'))
os.environ.pop('API_PREFIX', None)

_HERE = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_HERE, os.pardir))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def database():
    from murmur import config
    from utils.database_async import AsyncDatabase

    db = AsyncDatabase(config)
    await db.connect()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def client(database):
    from murmur import murmur

    murmur.state.database = database
    transport = ASGITransport(app=murmur, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url='http://testserver') as c:
        yield c


@pytest.fixture
def stored_docs(database):
    """Snapshot accessor for the raw documents in the secrets collection."""

    def _docs():
        return database.db.dump_data().get('secrets', [])

    return _docs

