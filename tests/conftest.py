import pytest_asyncio

from infrastructure.persistence.database import Database


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f'sqlite+aiosqlite:///{tmp_path / "rates.db"}')
    await db.create_tables()
    yield db
    await db.close()
