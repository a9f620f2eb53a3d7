"""Irrigation decision engine using the FAO-56 single-coefficient water balance.

    ETc = Kc(stage) x ETo(month)                      mm/day
    TAW = (FC - WP) / 100 x root depth                mm
    RAW threshold = TAW x (1 - MAD)                   mm
    Dr  = (FC - moisture) / 100 x root depth          mm below field capacity

Rules are evaluated in a fixed order and the first match wins: rain, season
over, over-saturation, depletion past the threshold, otherwise normal.
"""

from __future__ import annotations

import structlog

from app.config import Settings, get_settings
from app.models.enums import CropEnum, IrrigationStatusEnum, SoilEnum
from app.schemas.irrigation import IrrigationDetails, IrrigationResult
from app.schemas.knowledge import BilingualText
from app.services.knowledge_base import KnowledgeBase, get_knowledge_base

LITERS_PER_MM_PER_HECTARE = 10_000.0

_logger = structlog.get_logger("agriguard.irrigation")


def clamp_moisture(value: float) -> float:
	return max(0.0, min(100.0, float(value)))


class IrrigationEngine:
	def __init__(self, knowledge: KnowledgeBase | None = None, settings: Settings | None = None):
		self.knowledge = knowledge or get_knowledge_base()
		self.settings = settings or get_settings()

	def calculate_irrigation(
		self,
		crop: str | CropEnum,
		soil: str | SoilEnum,
		days_since_sowing: int,
		moisture_pct: float,
		month: int,
		is_raining: bool = False,
		*,
		weather_factor: float = 1.0,
		plot_size_ha: float = 1.0,
	) -> IrrigationResult:
		crop_profile = self.knowledge.get_crop(crop)
		soil_profile = self.knowledge.get_soil(soil)
		stage = self.knowledge.get_stage(crop_profile.crop, days_since_sowing)

		moisture = clamp_moisture(moisture_pct)
		eto = self.knowledge.nearest_monthly_eto(month)
		etc = stage.kc * eto
		root_depth_mm = stage.root_depth_m * 1000.0
		taw = soil_profile.available_water_fraction * root_depth_mm
		raw_threshold = taw * (1.0 - stage.mad)
		depletion = (soil_profile.field_capacity_pct - moisture) / 100.0 * root_depth_mm
		saturation_bound = self.settings.irrigation_stop_moisture_pct or soil_profile.saturation_bound_pct

		details = IrrigationDetails(
			crop=crop_profile.crop,
			soil=soil_profile.soil,
			stage=stage.stage,
			kc=stage.kc,
			eto_mm_day=eto,
			etc_mm_day=round(etc, 2),
			taw_mm=round(taw, 1),
			raw_threshold_mm=round(raw_threshold, 1),
			depletion_mm=round(depletion, 1),
			moisture_pct=moisture,
			saturation_bound_pct=saturation_bound,
			weather_factor=weather_factor,
		)
		saved = round(etc * LITERS_PER_MM_PER_HECTARE * plot_size_ha)

		if is_raining:
			result = IrrigationResult(
				status=IrrigationStatusEnum.skip,
				reason=BilingualText(
					en="It is raining. Skip irrigation today and let the rain water the field.",
					hi="Baarish ho rahi hai. Aaj sinchai mat karein, baarish se khet ko paani mil jayega.",
				),
				details=details,
				water_saved_liters=saved,
			)
		elif self.knowledge.is_past_season(crop_profile.crop, days_since_sowing):
			result = IrrigationResult(
				status=IrrigationStatusEnum.skip,
				reason=BilingualText(
					en=f"{crop_profile.name.en} season is over ({crop_profile.total_duration_days} days). No irrigation needed before harvest.",
					hi=f"{crop_profile.name.hi} ka season poora ho gaya ({crop_profile.total_duration_days} din). Katai se pehle sinchai ki zaroorat nahi.",
				),
				details=details,
				water_saved_liters=saved,
			)
		elif moisture > saturation_bound:
			result = IrrigationResult(
				status=IrrigationStatusEnum.stop,
				reason=BilingualText(
					en=f"Soil moisture {moisture:.0f}% is above {saturation_bound:.0f}%. Stop irrigation, there is a waterlogging risk.",
					hi=f"Mitti ki nami {moisture:.0f}% hai jo {saturation_bound:.0f}% se zyada hai. Sinchai band karein, jalbharav ka khatra hai.",
				),
				details=details,
				water_saved_liters=saved,
			)
		elif depletion > raw_threshold:
			depth = self._recommended_depth(depletion, etc, weather_factor)
			result = IrrigationResult(
				status=IrrigationStatusEnum.irrigate,
				depth_mm=depth,
				reason=BilingualText(
					en=(
						f"Root zone is {depletion:.0f} mm below field capacity, past the {raw_threshold:.0f} mm limit "
						f"for the {stage.description.en.lower()} stage. Apply {depth:.0f} mm of water."
					),
					hi=(
						f"Jad kshetra mein {depletion:.0f} mm paani ki kami hai, jo {raw_threshold:.0f} mm seema se zyada hai. "
						f"{depth:.0f} mm paani dein."
					),
				),
				details=details,
			)
		else:
			result = IrrigationResult(
				status=IrrigationStatusEnum.normal,
				reason=BilingualText(
					en=f"Soil moisture {moisture:.0f}% is adequate for {crop_profile.name.en.lower()}. No irrigation needed today.",
					hi=f"Mitti ki nami {moisture:.0f}% theek hai. Aaj sinchai ki zaroorat nahi.",
				),
				details=details,
				water_saved_liters=saved,
			)

		_logger.debug(
			"irrigation_decision",
			crop=crop_profile.crop.value,
			soil=soil_profile.soil.value,
			stage=stage.stage.value,
			status=result.status.value,
			depth_mm=result.depth_mm,
		)
		return result

	def _recommended_depth(self, depletion_mm: float, etc_mm_day: float, weather_factor: float) -> float:
		# Refill toward field capacity; never above it.
		planned = depletion_mm * self.settings.irrigation_refill_fraction + etc_mm_day * self.settings.irrigation_carryover_days
		depth = min(depletion_mm, min(depletion_mm, planned) * weather_factor)
		return round(depth, 1)
