"""Device registry and outbound command routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from redis.asyncio import Redis

from app.dependencies import get_redis, get_sensor_service
from app.schemas.sensors import DeviceCommand, DeviceCommandRequest, DeviceCreate, DeviceInfo, DeviceStatusUpdate
from app.services import live_feed
from app.services.sensor_service import SensorService

router = APIRouter(prefix="/devices", tags=["devices"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="device failure")


@router.get("", response_model=list[DeviceInfo])
async def list_devices(service: SensorService = Depends(get_sensor_service)) -> list[DeviceInfo]:
	return service.get_connected_devices()


@router.post("", response_model=DeviceInfo, status_code=status.HTTP_201_CREATED)
async def add_device(payload: DeviceCreate, service: SensorService = Depends(get_sensor_service)) -> DeviceInfo:
	return service.add_connected_device(
		payload.device_id,
		name=payload.name,
		battery_level=payload.battery_level,
		firmware_version=payload.firmware_version,
	)


@router.get("/{device_id}", response_model=DeviceInfo)
async def get_device(device_id: str, service: SensorService = Depends(get_sensor_service)) -> DeviceInfo:
	try:
		return service.get_device(device_id)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.patch("/{device_id}", response_model=DeviceInfo)
async def update_device(
	device_id: str,
	payload: DeviceStatusUpdate,
	service: SensorService = Depends(get_sensor_service),
) -> DeviceInfo:
	try:
		return service.update_device_status(device_id, payload.status)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.delete("/{device_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_device(device_id: str, service: SensorService = Depends(get_sensor_service)) -> Response:
	try:
		service.remove_device(device_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{device_id}/commands", response_model=DeviceCommand, status_code=status.HTTP_202_ACCEPTED)
async def send_command(
	device_id: str,
	payload: DeviceCommandRequest,
	service: SensorService = Depends(get_sensor_service),
	redis_client: Redis | None = Depends(get_redis),
) -> DeviceCommand:
	try:
		command = service.send_command_to_esp32(device_id, payload.command, payload.params)
	except Exception as exc:
		raise _map_error(exc) from exc
	await live_feed.publish_command(redis_client, command)
	return command


@router.get("/{device_id}/commands", response_model=list[DeviceCommand])
async def pending_commands(device_id: str, service: SensorService = Depends(get_sensor_service)) -> list[DeviceCommand]:
	try:
		service.get_device(device_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return service.get_pending_commands(device_id)
