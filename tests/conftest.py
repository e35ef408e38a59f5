"""Shared pytest fixtures: in-memory ledger database, async test client and auth helpers."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.jwt import create_access_token
from app.database import get_db
from app.main import app
from app.models import Base
from app.models.enums import VocabularyKindEnum
from app.models.registry import FarmProfile, VerifiedExpert
from app.schemas.analysis import AnalysisCreate, WeatherRange
from app.schemas.farm import FarmCreate
from app.services.analysis_service import AnalysisService
from app.services.expert_service import ExpertService
from app.services.farm_service import FarmService
from app.services.ledger_state import ensure_ledger_state

ADMIN = "admin-principal"
FARMER = "farmer-alice"
OTHER_FARMER = "farmer-bob"
EXPERT = "expert-carol"
OTHER_EXPERT = "expert-dave"


class FakeRedis:
	def __init__(self) -> None:
		self._counter: dict[str, int] = {}
		self.incr = AsyncMock(side_effect=self._incr)
		self.expire = AsyncMock(return_value=True)
		self.ping = AsyncMock(return_value=True)

	async def _incr(self, key: str) -> int:
		value = self._counter.get(key, 0) + 1
		self._counter[key] = value
		return value

	def reset_counters(self) -> None:
		self._counter.clear()


class LedgerSeeder:
	"""Builds registry and knowledge-base fixtures through the real services."""

	def __init__(self, db: AsyncSession) -> None:
		self.db = db

	async def vocabulary(
		self,
		crop_types: tuple[str, ...] = ("maize", "rice", "tomato"),
		health_metrics: tuple[str, ...] = ("soil_moisture", "leaf_wetness"),
		goals: tuple[str, ...] = ("yield", "water_saving"),
	) -> None:
		service = FarmService(self.db)
		for kind, terms in (
			(VocabularyKindEnum.crop_type, crop_types),
			(VocabularyKindEnum.health_metric, health_metrics),
			(VocabularyKindEnum.goal, goals),
		):
			for term in terms:
				await service.add_vocabulary_term(ADMIN, kind, term)

	async def farm(self, owner: str = FARMER, crop_type: str = "maize") -> FarmProfile:
		return await FarmService(self.db).register_farm(
			owner,
			FarmCreate(
				crop_type=crop_type,
				farm_size=12,
				latitude=-1.2921,
				longitude=36.8219,
				health_metrics=["soil_moisture"],
				goals=["yield"],
			),
		)

	async def expert(self, principal: str = EXPERT) -> VerifiedExpert:
		return await ExpertService(self.db).verify_expert(ADMIN, principal, "MSc Agronomy")

	async def analysis(
		self,
		expert: str = EXPERT,
		crop_types: tuple[str, ...] = ("maize",),
		min_temperature: int = 10,
		max_temperature: int = 35,
		min_humidity: int = 20,
		max_humidity: int = 90,
		max_uv_index: int = 10,
		name: str = "Heat stress watch",
	) -> int:
		template = await AnalysisService(self.db).create_analysis(
			expert,
			AnalysisCreate(
				name=name,
				description="Irrigate early when afternoons run hot.",
				crop_types=list(crop_types),
				weather=WeatherRange(
					min_temperature=min_temperature,
					max_temperature=max_temperature,
					min_humidity=min_humidity,
					max_humidity=max_humidity,
					max_uv_index=max_uv_index,
				),
				actions=["Irrigate before 08:00", "Mulch exposed rows"],
			),
		)
		return template.id


@pytest.fixture
async def db_engine() -> AsyncGenerator[Any, None]:
	"""A fresh in-memory SQLite database per test with every table created."""
	engine = create_async_engine(
		"sqlite+aiosqlite://",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
	)
	async with engine.begin() as connection:
		await connection.run_sync(Base.metadata.create_all)
	yield engine
	await engine.dispose()


@pytest.fixture
async def db_session(db_engine: Any) -> AsyncGenerator[AsyncSession, None]:
	"""Session bound to the test database with ledger state seeded for ADMIN."""
	factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
	async with factory() as session:
		await ensure_ledger_state(session, ADMIN)
		await session.commit()
		yield session


@pytest.fixture
def seeder(db_session: AsyncSession) -> LedgerSeeder:
	return LedgerSeeder(db_session)


@pytest.fixture
def fake_redis() -> FakeRedis:
	"""Reusable fake Redis client with async incr/expire behavior."""
	return FakeRedis()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and DB dependency bound to SQLite."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield db_session

	app.dependency_overrides[get_db] = override_get_db
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()
	if hasattr(app.state, "redis"):
		del app.state.redis


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
	def _headers(principal: str) -> dict[str, str]:
		token = create_access_token(principal, expires_minutes=30)
		return {"Authorization": f"Bearer {token}"}

	return _headers
