"""Pydantic schemas for irrigation decisions."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from app.models.enums import CropEnum, GrowthStageEnum, IrrigationStatusEnum, SoilEnum
from app.schemas.knowledge import BilingualText


class IrrigationRequest(BaseModel):
	crop: str = Field(min_length=1, max_length=50)
	soil: str = Field(min_length=1, max_length=50)
	days_since_sowing: int = Field(ge=0)
	moisture_pct: float
	month: int = Field(ge=1, le=12)
	is_raining: bool = False
	weather_factor: float = Field(default=1.0, gt=0, le=2.0)
	plot_size_ha: float = Field(default=1.0, gt=0)


class IrrigationDetails(BaseModel):
	crop: CropEnum
	soil: SoilEnum
	stage: GrowthStageEnum
	kc: float
	eto_mm_day: float
	etc_mm_day: float
	taw_mm: float
	raw_threshold_mm: float
	depletion_mm: float
	moisture_pct: float
	saturation_bound_pct: float
	weather_factor: float = 1.0


class IrrigationResult(BaseModel):
	status: IrrigationStatusEnum
	depth_mm: float | None = None
	reason: BilingualText
	details: IrrigationDetails
	water_saved_liters: float | None = None

	@model_validator(mode="after")
	def _depth_only_when_irrigating(self) -> "IrrigationResult":
		if (self.status == IrrigationStatusEnum.irrigate) != (self.depth_mm is not None):
			raise ValueError("depth_mm is present exactly when status is irrigate")
		return self
