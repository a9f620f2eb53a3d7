"""Irrigation decision routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_irrigation_engine
from app.schemas.irrigation import IrrigationRequest, IrrigationResult
from app.services.irrigation_engine import IrrigationEngine

router = APIRouter(prefix="/irrigation", tags=["irrigation"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="irrigation failure")


@router.post("/calculate", response_model=IrrigationResult)
async def calculate_irrigation(
	payload: IrrigationRequest,
	engine: IrrigationEngine = Depends(get_irrigation_engine),
) -> IrrigationResult:
	try:
		return engine.calculate_irrigation(
			payload.crop,
			payload.soil,
			payload.days_since_sowing,
			payload.moisture_pct,
			payload.month,
			payload.is_raining,
			weather_factor=payload.weather_factor,
			plot_size_ha=payload.plot_size_ha,
		)
	except Exception as exc:
		raise _map_error(exc) from exc
