"""Read-only lookup surface over the agronomic reference tables."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import TypeVar

from app.models import reference
from app.models.enums import CropEnum, GrowthStageEnum, SoilEnum, SymptomEnum
from app.schemas.knowledge import (
	CropProfile,
	CropSummary,
	FertilizerScheduleEntry,
	HealthRule,
	SoilProfile,
	SoilSummary,
	StageProfile,
	StageWindow,
)

CROP_ALIASES = {
	"wheat": "wheat",
	"gehun": "wheat",
	"rice": "rice",
	"paddy": "rice",
	"dhan": "rice",
	"dhaan": "rice",
	"cotton": "cotton",
	"kapas": "cotton",
}

SOIL_ALIASES = {
	"sandy": "sandy",
	"sand": "sandy",
	"loamy": "loamy",
	"loam": "loamy",
	"clay": "clay",
	"clayey": "clay",
	"black": "black",
	"black_cotton": "black",
}

_E = TypeVar("_E", bound=StrEnum)


class KnowledgeNotFoundError(LookupError):
	"""Raised when a crop, soil, stage or month key is not in the tables."""


def _resolve(kind: str, enum_cls: type[_E], value: str | _E, aliases: Mapping[str, str] | None = None) -> _E:
	if isinstance(value, enum_cls):
		return value
	token = str(value).strip().lower()
	if aliases is not None:
		token = aliases.get(token, token)
	try:
		return enum_cls(token)
	except ValueError:
		raise KnowledgeNotFoundError(f"unknown {kind}: {value!r}") from None


def resolve_crop(value: str | CropEnum) -> CropEnum:
	return _resolve("crop", CropEnum, value, CROP_ALIASES)


def resolve_soil(value: str | SoilEnum) -> SoilEnum:
	return _resolve("soil", SoilEnum, value, SOIL_ALIASES)


def resolve_stage(value: str | GrowthStageEnum) -> GrowthStageEnum:
	return _resolve("growth stage", GrowthStageEnum, value)


class KnowledgeBase:
	"""Immutable crop, soil, climate and diagnosis reference data."""

	def __init__(
		self,
		crops: Mapping[CropEnum, CropProfile] = reference.CROPS,
		soils: Mapping[SoilEnum, SoilProfile] = reference.SOILS,
		monthly_eto: Mapping[int, float] = reference.MONTHLY_ETO,
		fertilizer_schedules: Mapping[CropEnum, Sequence[FertilizerScheduleEntry]] = reference.FERTILIZER_SCHEDULES,
		health_rules: Sequence[HealthRule] = reference.HEALTH_RULES,
	):
		self._crops = dict(crops)
		self._soils = dict(soils)
		self._monthly_eto = dict(monthly_eto)
		self._schedules = {crop: tuple(sorted(entries, key=lambda item: item.due_day)) for crop, entries in fertilizer_schedules.items()}
		self._health_rules = tuple(health_rules)
		self._validate()

	def _validate(self) -> None:
		bad_months = [month for month in self._monthly_eto if not 1 <= month <= 12]
		if bad_months:
			raise ValueError(f"ETo table has invalid months: {bad_months}")

		seen: dict[frozenset[SymptomEnum], str] = {}
		for rule in self._health_rules:
			if rule.symptoms in seen:
				raise ValueError(f"health rules {seen[rule.symptoms]} and {rule.rule_id} share the same symptom set")
			seen[rule.symptoms] = rule.rule_id

		for crop, entries in self._schedules.items():
			windows = {window.profile.stage: window for window in self.get_crop(crop).stage_windows()}
			for entry in entries:
				window = windows.get(entry.stage)
				if window is None or not window.start_day <= entry.due_day < window.end_day:
					raise ValueError(f"{crop} dose due on day {entry.due_day} is outside its {entry.stage} stage")

	# ── Crops & stages ──────────────────────────────────────────────────────

	def get_crop(self, crop: str | CropEnum) -> CropProfile:
		key = resolve_crop(crop)
		profile = self._crops.get(key)
		if profile is None:
			raise KnowledgeNotFoundError(f"no crop profile for {key}")
		return profile

	def list_crops(self) -> list[CropSummary]:
		return [
			CropSummary(
				crop=profile.crop,
				name=profile.name,
				total_duration_days=profile.total_duration_days,
				stages=[item.stage for item in profile.stages],
			)
			for profile in self._crops.values()
		]

	def get_stage_window(self, crop: str | CropEnum, days_since_sowing: int) -> StageWindow:
		if days_since_sowing < 0:
			raise ValueError("days since sowing cannot be negative")
		windows = self.get_crop(crop).stage_windows()
		for window in windows:
			if window.start_day <= days_since_sowing < window.end_day:
				return window
		# Past the season: the crop stays in its final (harvest-ready) stage.
		return windows[-1]

	def get_stage(self, crop: str | CropEnum, days_since_sowing: int) -> StageProfile:
		return self.get_stage_window(crop, days_since_sowing).profile

	def get_stage_by_name(self, crop: str | CropEnum, stage: str | GrowthStageEnum) -> StageProfile:
		key = resolve_stage(stage)
		for profile in self.get_crop(crop).stages:
			if profile.stage == key:
				return profile
		raise KnowledgeNotFoundError(f"{crop} has no {key} stage")

	def is_past_season(self, crop: str | CropEnum, days_since_sowing: int) -> bool:
		return days_since_sowing > self.get_crop(crop).total_duration_days

	# ── Soils ───────────────────────────────────────────────────────────────

	def get_soil(self, soil: str | SoilEnum) -> SoilProfile:
		key = resolve_soil(soil)
		profile = self._soils.get(key)
		if profile is None:
			raise KnowledgeNotFoundError(f"no soil profile for {key}")
		return profile

	def list_soils(self) -> list[SoilSummary]:
		return [
			SoilSummary(
				soil=profile.soil,
				name=profile.name,
				field_capacity_pct=profile.field_capacity_pct,
				wilting_point_pct=profile.wilting_point_pct,
				infiltration_class=profile.infiltration_class,
			)
			for profile in self._soils.values()
		]

	# ── Climate ─────────────────────────────────────────────────────────────

	def get_monthly_eto(self, month: int) -> float:
		value = self._monthly_eto.get(month)
		if value is None:
			raise KnowledgeNotFoundError(f"no reference ET for month {month}")
		return value

	def nearest_monthly_eto(self, month: int) -> float:
		"""ETo for ``month``, or for the closest month on the calendar wheel."""
		if month in self._monthly_eto:
			return self._monthly_eto[month]
		if not self._monthly_eto:
			raise KnowledgeNotFoundError("reference ET table is empty")

		def distance(candidate: int) -> tuple[int, int]:
			delta = abs(candidate - month) % 12
			return (min(delta, 12 - delta), candidate)

		return self._monthly_eto[min(self._monthly_eto, key=distance)]

	# ── Fertilizer ──────────────────────────────────────────────────────────

	def get_fertilizer_schedule(
		self,
		crop: str | CropEnum,
		stage: str | GrowthStageEnum,
	) -> tuple[FertilizerScheduleEntry, ...]:
		key = resolve_crop(crop)
		stage_key = resolve_stage(stage)
		if key not in self._schedules:
			raise KnowledgeNotFoundError(f"no fertilizer schedule for {key}")
		return tuple(entry for entry in self._schedules[key] if entry.stage == stage_key)

	def get_crop_schedule(self, crop: str | CropEnum) -> tuple[FertilizerScheduleEntry, ...]:
		key = resolve_crop(crop)
		if key not in self._schedules:
			raise KnowledgeNotFoundError(f"no fertilizer schedule for {key}")
		return self._schedules[key]

	# ── Diagnosis ───────────────────────────────────────────────────────────

	def get_health_rules(self) -> tuple[HealthRule, ...]:
		return self._health_rules

	def list_symptoms(self) -> list[SymptomEnum]:
		present = {symptom for rule in self._health_rules for symptom in rule.symptoms}
		return [symptom for symptom in SymptomEnum if symptom in present]


_default: KnowledgeBase | None = None


def get_knowledge_base() -> KnowledgeBase:
	"""Process-wide knowledge base built from the bundled tables."""
	global _default
	if _default is None:
		_default = KnowledgeBase()
	return _default
