import pytest_asyncio

from roidbot.handlers.context import HandlerContext
from roidbot.store.db import Database


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'bot.db'}")
    database.connect()
    await database.init_models()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def ctx(db):
    return HandlerContext(
        db=db,
        verification_link="https://sign.example/?message={message}&address={address}",
    )
