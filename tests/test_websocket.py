from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any

from fastapi.testclient import TestClient

from app.main import app
from app.services.live_feed import LIVE_CHANNEL


@asynccontextmanager
async def _noop_lifespan(_: Any):
    yield


def _event(device_id: str, moisture: float) -> dict[str, Any]:
    return {
        "type": "message",
        "data": json.dumps({"event_type": "sensor_reading", "device_id": device_id, "reading": {"soil_moisture_pct": moisture}}),
    }


def test_live_feed_forwards_events(fake_redis: Any) -> None:
    fake_redis.payloads = [_event("esp-1", 31.0)]
    app.state.redis = fake_redis

    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _noop_lifespan
    with TestClient(app) as client:
        with client.websocket_connect("/ws/devices/live") as websocket:
            payload = websocket.receive_json()
            assert payload["event_type"] == "sensor_reading"
            assert payload["reading"]["soil_moisture_pct"] == 31.0
    assert fake_redis.last_pubsub is not None
    assert fake_redis.last_pubsub.subscribed_channel == LIVE_CHANNEL
    assert fake_redis.last_pubsub.unsubscribed_channel == LIVE_CHANNEL
    assert fake_redis.last_pubsub.closed is True
    app.router.lifespan_context = original_lifespan


def test_live_feed_filters_by_device(fake_redis: Any) -> None:
    fake_redis.payloads = [_event("esp-2", 18.0), _event("esp-1", 27.0)]
    app.state.redis = fake_redis

    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _noop_lifespan
    with TestClient(app) as client:
        with client.websocket_connect("/ws/devices/live?device_id=esp-1") as websocket:
            payload = websocket.receive_json()
            assert payload["device_id"] == "esp-1"
            assert payload["reading"]["soil_moisture_pct"] == 27.0
    app.router.lifespan_context = original_lifespan


def test_live_feed_without_redis_returns_error() -> None:
    app.state.redis = None

    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _noop_lifespan
    with TestClient(app) as client:
        with client.websocket_connect("/ws/devices/live") as websocket:
            payload = websocket.receive_json()
            assert payload["error"] == "live_feed_unavailable"
    app.router.lifespan_context = original_lifespan
