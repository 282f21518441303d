from __future__ import annotations

import pytest
from sqlalchemy import text

from app.core.integration_db_safety import assert_safe_integration_db
from app.db.models import Base
from app.db.session import engine


async def _postgres_unavailable_reason() -> str | None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        return str(exc)
    return None


@pytest.fixture(autouse=True)
async def promotions_table() -> None:
    # asyncpg connections are bound to one event loop; every test gets a fresh pool.
    await engine.dispose()

    reason = await _postgres_unavailable_reason()
    if reason is not None:
        pytest.skip(f"Postgres is required for integration tests: {reason}")
    assert_safe_integration_db(engine.url.render_as_string(hide_password=False))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("TRUNCATE TABLE promotions RESTART IDENTITY"))

    yield

    await engine.dispose()
