"""Read-only reference data routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_knowledge
from app.schemas.knowledge import CropProfile, CropSummary, SoilSummary
from app.services.knowledge_base import KnowledgeBase

router = APIRouter(prefix="/knowledge", tags=["knowledge"])


@router.get("/crops", response_model=list[CropSummary])
async def list_crops(knowledge: KnowledgeBase = Depends(get_knowledge)) -> list[CropSummary]:
	return knowledge.list_crops()


@router.get("/crops/{crop}", response_model=CropProfile)
async def get_crop(crop: str, knowledge: KnowledgeBase = Depends(get_knowledge)) -> CropProfile:
	try:
		return knowledge.get_crop(crop)
	except LookupError as exc:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/soils", response_model=list[SoilSummary])
async def list_soils(knowledge: KnowledgeBase = Depends(get_knowledge)) -> list[SoilSummary]:
	return knowledge.list_soils()
