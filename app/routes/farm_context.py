"""Active farm context routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_sensor_service
from app.schemas.sensors import FarmContext, FarmContextView
from app.services.sensor_service import SensorService

router = APIRouter(prefix="/farm-context", tags=["farm-context"])


def _view(service: SensorService, context: FarmContext) -> FarmContextView:
	return FarmContextView(context=context, days_since_sowing=service.days_since_sowing(context))


@router.get("", response_model=FarmContextView)
async def get_farm_context(service: SensorService = Depends(get_sensor_service)) -> FarmContextView:
	return _view(service, service.get_farm_context())


@router.put("", response_model=FarmContextView)
async def set_farm_context(
	payload: FarmContext,
	service: SensorService = Depends(get_sensor_service),
) -> FarmContextView:
	return _view(service, service.set_farm_context(payload))
