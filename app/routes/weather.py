"""Weather fallback and advisory routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.dependencies import get_weather_engine
from app.schemas.weather import SeasonInfo, WeatherCacheRequest, WeatherResult
from app.services.weather_engine import WeatherFallbackEngine

router = APIRouter(prefix="/weather", tags=["weather"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="weather failure")


@router.get("", response_model=WeatherResult)
async def get_weather(
	farm_key: str = Query(default="default", min_length=1, max_length=100),
	engine: WeatherFallbackEngine = Depends(get_weather_engine),
) -> WeatherResult:
	try:
		return engine.get_weather_data(farm_key=farm_key)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/cache", response_model=WeatherResult, status_code=status.HTTP_201_CREATED)
async def cache_weather(
	payload: WeatherCacheRequest,
	engine: WeatherFallbackEngine = Depends(get_weather_engine),
) -> WeatherResult:
	try:
		engine.cache_weather_data(payload.reading, farm_key=payload.farm_key)
		return engine.get_weather_data(farm_key=payload.farm_key)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/season", response_model=SeasonInfo)
async def get_season(engine: WeatherFallbackEngine = Depends(get_weather_engine)) -> SeasonInfo:
	return engine.get_current_season()
