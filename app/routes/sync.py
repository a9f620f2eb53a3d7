"""Sync bookkeeping routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_sensor_service
from app.schemas.sensors import SyncStatus, SyncStatusUpdate
from app.services.sensor_service import SensorService

router = APIRouter(prefix="/sync-status", tags=["sync"])


@router.get("", response_model=SyncStatus)
async def get_sync_status(service: SensorService = Depends(get_sensor_service)) -> SyncStatus:
	return service.get_sync_status()


@router.patch("", response_model=SyncStatus)
async def update_sync_status(
	payload: SyncStatusUpdate,
	service: SensorService = Depends(get_sensor_service),
) -> SyncStatus:
	try:
		return service.update_sync_status(**payload.model_dump(exclude_unset=True))
	except ValueError as exc:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
