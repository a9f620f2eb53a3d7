"""Pydantic schemas for the static agronomic reference tables."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.enums import (
	CropEnum,
	GrowthStageEnum,
	InfiltrationClassEnum,
	SoilEnum,
	SymptomEnum,
	UrgencyEnum,
)


class BilingualText(BaseModel):
	"""English text plus its Hinglish (romanised Hindi) rendering."""

	model_config = ConfigDict(frozen=True)

	en: str
	hi: str

	def joined(self, separator: str = "\n") -> str:
		return f"{self.hi}{separator}{self.en}"


class StageProfile(BaseModel):
	model_config = ConfigDict(frozen=True)

	stage: GrowthStageEnum
	duration_days: int = Field(gt=0)
	kc: float = Field(gt=0)
	root_depth_m: float = Field(gt=0)
	mad: float = Field(gt=0, lt=1)
	description: BilingualText


class StageWindow(BaseModel):
	"""A stage placed on the season calendar, days counted from sowing."""

	model_config = ConfigDict(frozen=True)

	profile: StageProfile
	start_day: int
	end_day: int


class CropProfile(BaseModel):
	model_config = ConfigDict(frozen=True)

	crop: CropEnum
	name: BilingualText
	scientific_name: str
	total_duration_days: int = Field(gt=0)
	stages: tuple[StageProfile, ...] = Field(min_length=1)

	@model_validator(mode="after")
	def _validate_stages(self) -> "CropProfile":
		ordering = list(GrowthStageEnum)
		positions = [ordering.index(item.stage) for item in self.stages]
		if positions != sorted(set(positions)):
			raise ValueError(f"stages of {self.crop} must be unique and in growth order")
		total = sum(item.duration_days for item in self.stages)
		if total != self.total_duration_days:
			raise ValueError(
				f"stage durations of {self.crop} sum to {total}, expected {self.total_duration_days}"
			)
		return self

	def stage_windows(self) -> list[StageWindow]:
		windows: list[StageWindow] = []
		start = 0
		for profile in self.stages:
			end = start + profile.duration_days
			windows.append(StageWindow(profile=profile, start_day=start, end_day=end))
			start = end
		return windows


class SoilProfile(BaseModel):
	model_config = ConfigDict(frozen=True)

	soil: SoilEnum
	name: BilingualText
	field_capacity_pct: float = Field(gt=0, le=100)
	wilting_point_pct: float = Field(ge=0, lt=100)
	infiltration_class: InfiltrationClassEnum
	saturation_bound_pct: float = Field(gt=0, le=100)

	@model_validator(mode="after")
	def _validate_water_bounds(self) -> "SoilProfile":
		if self.field_capacity_pct <= self.wilting_point_pct:
			raise ValueError(f"{self.soil}: field capacity must exceed wilting point")
		if self.saturation_bound_pct <= self.field_capacity_pct:
			raise ValueError(f"{self.soil}: saturation bound must exceed field capacity")
		return self

	@property
	def available_water_fraction(self) -> float:
		return (self.field_capacity_pct - self.wilting_point_pct) / 100.0


class NutrientDose(BaseModel):
	model_config = ConfigDict(frozen=True)

	n: float = Field(default=0.0, ge=0)
	p: float = Field(default=0.0, ge=0)
	k: float = Field(default=0.0, ge=0)

	@property
	def is_empty(self) -> bool:
		return self.n == 0 and self.p == 0 and self.k == 0


class FertilizerScheduleEntry(BaseModel):
	model_config = ConfigDict(frozen=True)

	crop: CropEnum
	stage: GrowthStageEnum
	due_day: int = Field(ge=0)
	dose: NutrientDose
	window: BilingualText
	tips: BilingualText


class HealthRule(BaseModel):
	model_config = ConfigDict(frozen=True)

	rule_id: str
	symptoms: frozenset[SymptomEnum] = Field(min_length=1)
	disease: str
	prior: float = Field(gt=0, le=1)
	urgency: UrgencyEnum
	advice: BilingualText
	weight: int | None = None
	# Field conditions that make this diagnosis more likely.
	boosted_by: frozenset[str] = frozenset()

	@property
	def specificity(self) -> int:
		return self.weight if self.weight is not None else len(self.symptoms)


class CropSummary(BaseModel):
	crop: CropEnum
	name: BilingualText
	total_duration_days: int
	stages: list[GrowthStageEnum] = Field(default_factory=list)


class SoilSummary(BaseModel):
	soil: SoilEnum
	name: BilingualText
	field_capacity_pct: float
	wilting_point_pct: float
	infiltration_class: InfiltrationClassEnum
