"""Shared pytest fixtures: frozen clock, fresh services, fake Redis, async test client."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.dependencies import install_services
from app.main import app
from app.services.knowledge_base import KnowledgeBase, get_knowledge_base
from app.services.sensor_service import SensorService
from app.services.voice_router import VoiceCommandRouter
from app.services.weather_engine import WeatherFallbackEngine


class FrozenClock:
	"""Callable clock that only moves when a test advances it."""

	def __init__(self, now: datetime) -> None:
		self.now = now

	def __call__(self) -> datetime:
		return self.now

	def advance(self, **delta: float) -> datetime:
		self.now = self.now + timedelta(**delta)
		return self.now


class FakePubSub:
	def __init__(self, payloads: list[dict[str, Any]]) -> None:
		self.payloads = payloads
		self.index = 0
		self.subscribed_channel: str | None = None
		self.unsubscribed_channel: str | None = None
		self.closed = False

	async def subscribe(self, channel: str) -> None:
		self.subscribed_channel = channel

	async def get_message(self, ignore_subscribe_messages: bool, timeout: float) -> dict[str, Any] | None:
		if self.index >= len(self.payloads):
			return None
		message = self.payloads[self.index]
		self.index += 1
		return message

	async def unsubscribe(self, channel: str) -> None:
		self.unsubscribed_channel = channel

	async def close(self) -> None:
		self.closed = True


class FakeRedis:
	def __init__(self, payloads: list[dict[str, Any]] | None = None) -> None:
		self.payloads = payloads or []
		self.publish = AsyncMock(return_value=1)
		self.last_pubsub: FakePubSub | None = None

	def pubsub(self) -> FakePubSub:
		self.last_pubsub = FakePubSub(self.payloads)
		return self.last_pubsub


@pytest.fixture
def settings() -> Settings:
	"""Default settings, isolated from any AGRIGUARD_* variables in the environment."""
	return Settings(_env_file=None, redis_enabled=False, log_format="console")


@pytest.fixture
def clock() -> FrozenClock:
	# Mid-April: ETo 5.8 mm/day, summer season.
	return FrozenClock(datetime(2025, 4, 15, 9, 30, tzinfo=UTC))


@pytest.fixture
def knowledge() -> KnowledgeBase:
	return get_knowledge_base()


@pytest.fixture
def sensor_service(settings: Settings, clock: FrozenClock) -> SensorService:
	return SensorService(settings, clock=clock)


@pytest.fixture
def weather_engine(settings: Settings, clock: FrozenClock) -> WeatherFallbackEngine:
	return WeatherFallbackEngine(settings, clock=clock)


@pytest.fixture
def voice_router(
	sensor_service: SensorService,
	weather_engine: WeatherFallbackEngine,
	knowledge: KnowledgeBase,
	settings: Settings,
	clock: FrozenClock,
) -> VoiceCommandRouter:
	return VoiceCommandRouter(sensor_service, weather_engine, knowledge, settings, clock=clock)


@pytest.fixture
def fake_redis() -> FakeRedis:
	"""Reusable fake Redis client with async publish and pubsub behavior."""
	return FakeRedis()


@pytest.fixture
async def client(settings: Settings, clock: FrozenClock) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and fresh services on app.state."""
	install_services(app, settings, clock=clock)
	app.state.redis = None
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
