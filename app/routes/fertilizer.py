"""Fertilizer recommendation routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_fertilizer_engine
from app.schemas.fertilizer import FertilizerRequest, FertilizerResult
from app.services.fertilizer_engine import FertilizerEngine

router = APIRouter(prefix="/fertilizer", tags=["fertilizer"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="fertilizer failure")


@router.post("/calculate", response_model=FertilizerResult)
async def calculate_fertilizer(
	payload: FertilizerRequest,
	engine: FertilizerEngine = Depends(get_fertilizer_engine),
) -> FertilizerResult:
	try:
		return engine.calculate_fertilizer(payload.crop, payload.soil, payload.days_since_sowing)
	except Exception as exc:
		raise _map_error(exc) from exc
