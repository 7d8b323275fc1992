from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from professordex.db.database import get_session, get_session_factory
from professordex.main import app
from professordex.models.card import Card
from professordex.models.db import Base
from professordex.services.tcg_api import TcgApiClient, get_tcg_client

CATALOG_URL = "https://tcg.test/v2"


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session and catalog."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_tcg_client] = lambda: TcgApiClient(
        base_url=CATALOG_URL, api_key=""
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def card_payload(
    card_id: str = "sv3pt5-1",
    name: str = "Bulbasaur",
    supertype: str = "Pokémon",
    subtypes: list[str] | None = None,
    types: list[str] | None = None,
    rarity: str | None = "Common",
    number: str | None = None,
    regulation_mark: str | None = "G",
    set_id: str = "sv3pt5",
    prices: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """A catalog card shaped like an api.pokemontcg.io response item."""
    if prices is None:
        prices = {"normal": {"market": 0.12}, "reverseHolofoil": {"market": 0.45}}
    return {
        "id": card_id,
        "name": name,
        "supertype": supertype,
        "subtypes": subtypes if subtypes is not None else ["Basic"],
        "types": types if types is not None else ["Grass"],
        "rarity": rarity,
        "number": number if number is not None else card_id.rsplit("-", 1)[-1],
        "artist": "Mitsuhiro Arita",
        "regulationMark": regulation_mark,
        "set": {"id": set_id, "name": "151", "series": "Scarlet & Violet"},
        "images": {
            "small": f"https://images.pokemontcg.io/{set_id}/1.png",
            "large": f"https://images.pokemontcg.io/{set_id}/1_hires.png",
        },
        "tcgplayer": {"prices": prices},
    }


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory for catalog card payloads."""
    return card_payload


@pytest.fixture
def make_card() -> Callable[..., Card]:
    """Factory for Card domain objects."""

    def _make(**kwargs: Any) -> Card:
        return Card.from_api(card_payload(**kwargs))

    return _make
