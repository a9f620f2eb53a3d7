"""Fertilizer timing and dose engine built on the ICAR split-dose schedules."""

from __future__ import annotations

import math

import structlog

from app.models.enums import CropEnum, FertilizerStatusEnum, GrowthStageEnum, SoilEnum
from app.schemas.fertilizer import ApplicationWindow, FertilizerResult, ProductAmounts
from app.schemas.knowledge import BilingualText, FertilizerScheduleEntry, NutrientDose
from app.services.knowledge_base import KnowledgeBase, get_knowledge_base

# Application window around each due day, in days.
WINDOW_BEFORE_DAYS = 5
WINDOW_AFTER_DAYS = 10

# Nutrient content of the commercial products.
UREA_N = 0.46
DAP_N = 0.18
DAP_P = 0.46
MOP_K = 0.60

SANDY_N_FACTOR = 1.1
SANDY_N_SPLITS = 2
CLAY_MAX_N_PER_APPLICATION = 40.0
BLACK_K_FACTOR = 0.9

_logger = structlog.get_logger("agriguard.fertilizer")


def adjust_for_soil(dose: NutrientDose, soil: SoilEnum) -> tuple[NutrientDose, int]:
	"""Return the soil-adjusted dose and how many applications to split it into."""
	n, p, k = dose.n, dose.p, dose.k
	splits = 1
	if soil == SoilEnum.sandy:
		n = n * SANDY_N_FACTOR
		if n > 0:
			splits = SANDY_N_SPLITS
	elif soil == SoilEnum.clay:
		if n > CLAY_MAX_N_PER_APPLICATION:
			splits = math.ceil(n / CLAY_MAX_N_PER_APPLICATION)
	elif soil == SoilEnum.black:
		k = k * BLACK_K_FACTOR
	return NutrientDose(n=round(n, 1), p=round(p, 1), k=round(k, 1)), splits


def to_products(dose: NutrientDose) -> ProductAmounts:
	"""DAP covers phosphorus and part of the nitrogen, urea the rest, MOP the potash."""
	dap = dose.p / DAP_P if dose.p > 0 else 0.0
	remaining_n = max(0.0, dose.n - dap * DAP_N)
	urea = remaining_n / UREA_N if remaining_n > 0 else 0.0
	mop = dose.k / MOP_K if dose.k > 0 else 0.0
	return ProductAmounts(urea_kg=round(urea, 1), dap_kg=round(dap, 1), mop_kg=round(mop, 1))


def application_window(entry: FertilizerScheduleEntry, days_since_sowing: int) -> ApplicationWindow:
	return ApplicationWindow(
		due_day=entry.due_day,
		start_day=max(0, entry.due_day - WINDOW_BEFORE_DAYS),
		end_day=entry.due_day + WINDOW_AFTER_DAYS,
		days_from_now=entry.due_day - days_since_sowing,
	)


def _application_method(stage: GrowthStageEnum) -> BilingualText:
	if stage == GrowthStageEnum.initial:
		return BilingualText(
			en="Broadcast and incorporate into the soil before sowing or transplanting.",
			hi="Buwai se pehle khet mein chhitak kar mitti mein mila dein.",
		)
	return BilingualText(
		en="Apply as top dressing along the rows, 5-7 cm away from the plant base.",
		hi="Paudhon ki line ke beech, jad se 5-7 cm door top dressing karein.",
	)


def _soil_tip(soil: SoilEnum, splits: int) -> BilingualText | None:
	if soil == SoilEnum.sandy:
		return BilingualText(
			en=f"Sandy soil leaches nitrogen quickly, so apply it in {splits} smaller doses.",
			hi=f"Balui mitti mein nitrogen jaldi beh jata hai, isliye {splits} chhoti khuraak mein dein.",
		)
	if soil == SoilEnum.clay and splits > 1:
		return BilingualText(
			en=f"Clay soil dissolves fertilizer slowly. Split the nitrogen into {splits} applications after irrigation.",
			hi=f"Chikni mitti mein khaad dheere ghulti hai. Nitrogen ko {splits} baar mein sinchai ke baad dein.",
		)
	if soil == SoilEnum.black:
		return BilingualText(
			en="Black soil is usually rich in potash, so the potash dose is reduced.",
			hi="Kaali mitti mein potash aksar zyada hota hai, isliye potash kam diya gaya hai.",
		)
	return None


class FertilizerEngine:
	def __init__(self, knowledge: KnowledgeBase | None = None):
		self.knowledge = knowledge or get_knowledge_base()

	def calculate_fertilizer(
		self,
		crop: str | CropEnum,
		soil: str | SoilEnum,
		days_since_sowing: int,
	) -> FertilizerResult:
		crop_profile = self.knowledge.get_crop(crop)
		soil_profile = self.knowledge.get_soil(soil)
		stage = self.knowledge.get_stage(crop_profile.crop, days_since_sowing)
		schedule = self.knowledge.get_crop_schedule(crop_profile.crop)

		current = self._entry_in_window(schedule, days_since_sowing)
		if current is not None:
			result = self._recommend(FertilizerStatusEnum.apply_now, current, crop_profile.crop, soil_profile.soil, stage.stage, days_since_sowing)
		else:
			upcoming = next(
				(entry for entry in schedule if entry.due_day - WINDOW_BEFORE_DAYS > days_since_sowing),
				None,
			)
			if upcoming is not None:
				result = self._recommend(FertilizerStatusEnum.upcoming, upcoming, crop_profile.crop, soil_profile.soil, stage.stage, days_since_sowing)
			else:
				result = FertilizerResult(
					status=FertilizerStatusEnum.no_action,
					crop=crop_profile.crop,
					soil=soil_profile.soil,
					stage=stage.stage,
					reason=BilingualText(
						en="All scheduled fertilizer applications for this season are complete.",
						hi="Is season ki saari khaad di ja chuki hai.",
					),
				)

		_logger.debug(
			"fertilizer_decision",
			crop=crop_profile.crop.value,
			soil=soil_profile.soil.value,
			days_since_sowing=days_since_sowing,
			status=result.status.value,
		)
		return result

	@staticmethod
	def _entry_in_window(
		schedule: tuple[FertilizerScheduleEntry, ...],
		days_since_sowing: int,
	) -> FertilizerScheduleEntry | None:
		matches = [
			entry
			for entry in schedule
			if -WINDOW_BEFORE_DAYS <= days_since_sowing - entry.due_day <= WINDOW_AFTER_DAYS
		]
		if not matches:
			return None
		return min(matches, key=lambda entry: (abs(days_since_sowing - entry.due_day), entry.due_day))

	def _recommend(
		self,
		status: FertilizerStatusEnum,
		entry: FertilizerScheduleEntry,
		crop: CropEnum,
		soil: SoilEnum,
		stage: GrowthStageEnum,
		days_since_sowing: int,
	) -> FertilizerResult:
		dose, splits = adjust_for_soil(entry.dose, soil)
		per_application = NutrientDose(
			n=round(dose.n / splits, 1),
			p=round(dose.p / splits, 1),
			k=round(dose.k / splits, 1),
		)
		window = application_window(entry, days_since_sowing)
		products = to_products(dose)

		if status == FertilizerStatusEnum.apply_now:
			if window.days_from_now > 0:
				timing_en = f"due in {window.days_from_now} days, you can apply from today"
				timing_hi = f"{window.days_from_now} din mein dena hai, aaj se de sakte hain"
			elif window.days_from_now == 0:
				timing_en = "due today"
				timing_hi = "aaj dene ka sahi samay hai"
			else:
				timing_en = f"was due {-window.days_from_now} days ago, apply now"
				timing_hi = f"{-window.days_from_now} din pehle dena tha, abhi dein"
			reason = BilingualText(
				en=(
					f"{entry.window.en}: {timing_en}. Apply N {dose.n:g}, P {dose.p:g}, K {dose.k:g} kg/ha "
					f"(urea {products.urea_kg:g}, DAP {products.dap_kg:g}, MOP {products.mop_kg:g} kg/ha)."
				),
				hi=(
					f"{entry.window.hi}: {timing_hi}. Urea {products.urea_kg:g} kg, DAP {products.dap_kg:g} kg, "
					f"MOP {products.mop_kg:g} kg prati hectare dein."
				),
			)
		else:
			reason = BilingualText(
				en=f"No fertilizer needed now. Next application ({entry.window.en.lower()}) is in {window.days_from_now} days.",
				hi=f"Abhi khaad ki zaroorat nahi. Agli khuraak ({entry.window.hi}) {window.days_from_now} din baad deni hai.",
			)

		tips = entry.tips
		soil_tip = _soil_tip(soil, splits)
		if soil_tip is not None:
			tips = BilingualText(en=f"{tips.en} {soil_tip.en}", hi=f"{tips.hi} {soil_tip.hi}")

		return FertilizerResult(
			status=status,
			crop=crop,
			soil=soil,
			stage=stage,
			dose=dose,
			splits=splits,
			per_application=per_application,
			products=products,
			window=window,
			reason=reason,
			application=_application_method(entry.stage),
			tips=tips,
		)
