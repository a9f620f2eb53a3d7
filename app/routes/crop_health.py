"""Crop diagnosis routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_crop_health_engine
from app.schemas.crop_health import DiagnoseRequest, DiagnosisResult, SymptomInfo
from app.services.crop_health_engine import CropHealthEngine

router = APIRouter(prefix="/crop-health", tags=["crop-health"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="diagnosis failure")


@router.post("/diagnose", response_model=DiagnosisResult)
async def diagnose(
	payload: DiagnoseRequest,
	engine: CropHealthEngine = Depends(get_crop_health_engine),
) -> DiagnosisResult:
	try:
		return engine.diagnose_crop_health(payload.symptoms, payload.conditions)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/symptoms", response_model=list[SymptomInfo])
async def list_symptoms(engine: CropHealthEngine = Depends(get_crop_health_engine)) -> list[SymptomInfo]:
	return engine.list_symptoms()
