"""Redis pub/sub fan-out of accepted device readings and queued commands."""

from __future__ import annotations

import json
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.schemas.sensors import DeviceCommand, IngestResult

LIVE_CHANNEL = "devices:live"

_logger = structlog.get_logger("agriguard.live_feed")


def command_channel(device_id: str) -> str:
	return f"device:{device_id}:commands"


async def _publish(redis_client: Redis | None, channel: str, payload: dict[str, Any]) -> bool:
	if redis_client is None:
		return False
	try:
		await redis_client.publish(channel, json.dumps(payload))
	except (RedisError, OSError) as exc:
		# Best effort; the state change has already been applied.
		_logger.warning("live_feed_publish_failed", channel=channel, error=str(exc))
		return False
	return True


async def publish_reading(redis_client: Redis | None, result: IngestResult) -> bool:
	payload = {
		"event_type": "sensor_reading",
		"device_id": result.device.device_id,
		"reading": result.reading.model_dump(mode="json"),
		"device_status": result.device.status.value,
	}
	return await _publish(redis_client, LIVE_CHANNEL, payload)


async def publish_command(redis_client: Redis | None, command: DeviceCommand) -> bool:
	payload = {"event_type": "device_command", **command.model_dump(mode="json")}
	return await _publish(redis_client, command_channel(command.device_id), payload)
