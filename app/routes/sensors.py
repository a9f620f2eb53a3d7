"""Sensor reading and device message ingestion routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from redis.asyncio import Redis

from app.dependencies import get_redis, get_sensor_service
from app.schemas.sensors import DevicePayloadIn, IngestResult, SensorReading
from app.services import live_feed
from app.services.sensor_service import SensorService

router = APIRouter(prefix="/sensors", tags=["sensors"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="sensor failure")


@router.get("/current", response_model=SensorReading)
async def current_reading(service: SensorService = Depends(get_sensor_service)) -> SensorReading:
	return service.get_sensor_data()


@router.post("/messages", response_model=IngestResult)
async def ingest_message(
	payload: DevicePayloadIn,
	service: SensorService = Depends(get_sensor_service),
	redis_client: Redis | None = Depends(get_redis),
) -> IngestResult:
	try:
		result = service.on_esp32_message(payload.device_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	if result.accepted:
		await live_feed.publish_reading(redis_client, result)
	return result
