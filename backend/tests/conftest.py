from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from housy.core.db import get_session
from housy.main import app
from housy.models import bill as _bill  # noqa: F401
from housy.models import chore as _chore  # noqa: F401
from housy.models import expense as _expense  # noqa: F401
from housy.models import expense_category as _expense_category  # noqa: F401
from housy.models import household as _household  # noqa: F401
from housy.models import member as _member  # noqa: F401
from housy.models import user as _user  # noqa: F401
from housy.models import waste as _waste  # noqa: F401


@pytest.fixture
async def session_maker() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield maker

    await engine.dispose()


@pytest.fixture
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as db_session:
            yield db_session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()
