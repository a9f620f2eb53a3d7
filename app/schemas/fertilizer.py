"""Pydantic schemas for fertilizer recommendations."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.enums import CropEnum, FertilizerStatusEnum, GrowthStageEnum, SoilEnum
from app.schemas.knowledge import BilingualText, NutrientDose


class FertilizerRequest(BaseModel):
	crop: str = Field(min_length=1, max_length=50)
	soil: str = Field(min_length=1, max_length=50)
	days_since_sowing: int = Field(ge=0)


class ApplicationWindow(BaseModel):
	due_day: int
	start_day: int
	end_day: int
	days_from_now: int


class ProductAmounts(BaseModel):
	"""Commercial product quantities in kg/ha."""

	urea_kg: float = 0.0
	dap_kg: float = 0.0
	mop_kg: float = 0.0


class FertilizerResult(BaseModel):
	status: FertilizerStatusEnum
	crop: CropEnum
	soil: SoilEnum
	stage: GrowthStageEnum
	dose: NutrientDose | None = None
	splits: int = Field(default=1, ge=1)
	per_application: NutrientDose | None = None
	products: ProductAmounts | None = None
	window: ApplicationWindow | None = None
	reason: BilingualText
	application: BilingualText | None = None
	tips: BilingualText | None = None
