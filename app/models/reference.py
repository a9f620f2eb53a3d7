"""Agronomic reference tables: FAO-56 crop coefficients and ICAR schedules.

Everything here is immutable and loaded once at import time. Tables are
validated by their pydantic models on construction, so a malformed edit fails
at startup instead of producing a wrong recommendation later:

    CROPS              crop -> CropProfile (stages sum to the season length)
    SOILS              soil -> SoilProfile (field capacity > wilting point)
    MONTHLY_ETO        month 1..12 -> reference ET, mm/day (IMD averages)
    FERTILIZER_SCHEDULES  crop -> ordered ICAR split-dose entries
    HEALTH_RULES       ordered symptom-set rules; order breaks ties
    SEASONAL_PATTERNS  month -> North-plains climatology
"""

from __future__ import annotations

from types import MappingProxyType

from app.models.enums import (
	CropEnum,
	GrowthStageEnum,
	InfiltrationClassEnum,
	SeasonEnum,
	SoilEnum,
	SymptomEnum,
	UrgencyEnum,
)
from app.schemas.knowledge import (
	BilingualText,
	CropProfile,
	FertilizerScheduleEntry,
	HealthRule,
	NutrientDose,
	SoilProfile,
	StageProfile,
)
from app.schemas.weather import SeasonalPattern

_T = BilingualText


def _stage(
	stage: GrowthStageEnum,
	days: int,
	kc: float,
	root_depth_m: float,
	mad: float,
	en: str,
	hi: str,
) -> StageProfile:
	return StageProfile(
		stage=stage,
		duration_days=days,
		kc=kc,
		root_depth_m=root_depth_m,
		mad=mad,
		description=_T(en=en, hi=hi),
	)


# ── Crops ───────────────────────────────────────────────────────────────────

CROPS = MappingProxyType(
	{
		CropEnum.wheat: CropProfile(
			crop=CropEnum.wheat,
			name=_T(en="Wheat", hi="Gehun"),
			scientific_name="Triticum aestivum",
			total_duration_days=120,
			stages=(
				_stage(GrowthStageEnum.initial, 20, 0.40, 0.15, 0.50, "Germination & seedling", "Ankuran aur paudh avastha"),
				_stage(GrowthStageEnum.development, 30, 0.80, 0.30, 0.50, "Tillering & crown root", "Kalle nikalna"),
				_stage(GrowthStageEnum.mid, 40, 1.15, 0.60, 0.50, "Heading & flowering", "Baali nikalna aur phool aana"),
				_stage(GrowthStageEnum.late, 30, 0.40, 0.60, 0.60, "Grain filling & maturity", "Daana bharna aur pakna"),
			),
		),
		CropEnum.rice: CropProfile(
			crop=CropEnum.rice,
			name=_T(en="Rice (paddy)", hi="Dhaan"),
			scientific_name="Oryza sativa",
			total_duration_days=135,
			stages=(
				_stage(GrowthStageEnum.initial, 30, 1.10, 0.20, 0.20, "Nursery & transplanting", "Nursery aur ropai"),
				_stage(GrowthStageEnum.development, 30, 1.20, 0.30, 0.20, "Tillering", "Kalle phootna"),
				_stage(GrowthStageEnum.mid, 40, 1.20, 0.40, 0.20, "Panicle & flowering", "Baali nikalna aur phool"),
				_stage(GrowthStageEnum.late, 35, 0.90, 0.40, 0.30, "Grain fill & maturity", "Daana bharna aur pakav"),
			),
		),
		CropEnum.cotton: CropProfile(
			crop=CropEnum.cotton,
			name=_T(en="Cotton", hi="Kapas"),
			scientific_name="Gossypium hirsutum",
			total_duration_days=180,
			stages=(
				_stage(GrowthStageEnum.initial, 30, 0.45, 0.20, 0.65, "Emergence & seedling", "Ankuran aur paudh"),
				_stage(GrowthStageEnum.development, 40, 0.75, 0.50, 0.65, "Vegetative growth", "Vanaspatik vriddhi"),
				_stage(GrowthStageEnum.mid, 60, 1.15, 1.00, 0.65, "Flowering & boll formation", "Phool aur tinde banna"),
				_stage(GrowthStageEnum.late, 50, 0.70, 1.00, 0.70, "Boll opening & harvest", "Tinde khulna aur katai"),
			),
		),
	}
)

# ── Soils ───────────────────────────────────────────────────────────────────

SOILS = MappingProxyType(
	{
		SoilEnum.sandy: SoilProfile(
			soil=SoilEnum.sandy,
			name=_T(en="Sandy soil", hi="Balui mitti"),
			field_capacity_pct=15.0,
			wilting_point_pct=5.0,
			infiltration_class=InfiltrationClassEnum.fast,
			saturation_bound_pct=70.0,
		),
		SoilEnum.loamy: SoilProfile(
			soil=SoilEnum.loamy,
			name=_T(en="Loamy soil", hi="Domat mitti"),
			field_capacity_pct=30.0,
			wilting_point_pct=12.0,
			infiltration_class=InfiltrationClassEnum.moderate,
			saturation_bound_pct=75.0,
		),
		SoilEnum.clay: SoilProfile(
			soil=SoilEnum.clay,
			name=_T(en="Clay soil", hi="Chikni mitti"),
			field_capacity_pct=40.0,
			wilting_point_pct=20.0,
			infiltration_class=InfiltrationClassEnum.slow,
			saturation_bound_pct=80.0,
		),
		SoilEnum.black: SoilProfile(
			soil=SoilEnum.black,
			name=_T(en="Black cotton soil", hi="Kaali mitti"),
			field_capacity_pct=50.0,
			wilting_point_pct=25.0,
			infiltration_class=InfiltrationClassEnum.very_slow,
			saturation_bound_pct=80.0,
		),
	}
)

# ── Reference evapotranspiration (mm/day) ───────────────────────────────────

MONTHLY_ETO = MappingProxyType(
	{
		1: 2.5,
		2: 3.2,
		3: 4.5,
		4: 5.8,
		5: 6.5,
		6: 5.5,  # monsoon onset
		7: 4.2,
		8: 4.0,
		9: 4.5,
		10: 4.2,
		11: 3.0,
		12: 2.3,
	}
)

# ── Fertilizer split doses (kg/ha) ──────────────────────────────────────────


def _dose(
	crop: CropEnum,
	stage: GrowthStageEnum,
	due_day: int,
	n: float,
	p: float,
	k: float,
	window: tuple[str, str],
	tips: tuple[str, str],
) -> FertilizerScheduleEntry:
	return FertilizerScheduleEntry(
		crop=crop,
		stage=stage,
		due_day=due_day,
		dose=NutrientDose(n=n, p=p, k=k),
		window=_T(en=window[0], hi=window[1]),
		tips=_T(en=tips[0], hi=tips[1]),
	)


FERTILIZER_SCHEDULES = MappingProxyType(
	{
		CropEnum.wheat: (
			_dose(
				CropEnum.wheat, GrowthStageEnum.initial, 0, 60, 60, 40,
				("Basal dose at sowing", "Buwai ke samay mool khuraak"),
				("Mix well with soil before sowing. Use DAP for phosphorus.", "Buwai se pehle mitti mein achhi tarah milayein. Phosphorus ke liye DAP lein."),
			),
			_dose(
				CropEnum.wheat, GrowthStageEnum.development, 21, 30, 0, 0,
				("First top dressing at tillering", "Kalle phootne par pehli top dressing"),
				("Apply urea after light irrigation. Avoid waterlogging.", "Halki sinchai ke baad urea daalein. Jalbharav se bachein."),
			),
			_dose(
				CropEnum.wheat, GrowthStageEnum.mid, 50, 30, 0, 0,
				("Second top dressing before heading", "Baali nikalne se pehle doosri top dressing"),
				("Critical for grain development. Ensure adequate moisture.", "Daane ke vikas ke liye zaroori. Paryapt nami rakhein."),
			),
		),
		CropEnum.rice: (
			_dose(
				CropEnum.rice, GrowthStageEnum.initial, 0, 40, 60, 40,
				("Basal dose before transplanting", "Ropai se pehle mool khuraak"),
				("Incorporate in puddled soil. Drain field before applying.", "Keechad wali mitti mein milayein. Daalne se pehle paani nikaalein."),
			),
			_dose(
				CropEnum.rice, GrowthStageEnum.development, 35, 40, 0, 0,
				("First top dressing at active tillering", "Sakriya kalle phootne par pehli top dressing"),
				("Maintain 2-3 cm standing water. Apply in the evening.", "2-3 cm khada paani rakhein. Shaam ko daalein."),
			),
			_dose(
				CropEnum.rice, GrowthStageEnum.mid, 65, 40, 0, 20,
				("Second dose at panicle initiation", "Baali nikalne par doosri khuraak"),
				("Most critical stage. Add potash for grain quality.", "Sabse zaroori avastha. Daane ki quality ke liye potash daalein."),
			),
		),
		CropEnum.cotton: (
			_dose(
				CropEnum.cotton, GrowthStageEnum.initial, 0, 20, 60, 60,
				("Basal dose at sowing", "Buwai ke samay mool khuraak"),
				("Place 5 cm away from seed. Avoid direct contact.", "Beej se 5 cm door rakhein. Seedha sampark na ho."),
			),
			_dose(
				CropEnum.cotton, GrowthStageEnum.development, 30, 40, 0, 0,
				("First top dressing at squaring", "Squaring par pehli top dressing"),
				("Apply in a ring around the plant. Irrigate after application.", "Paudhe ke chaaron taraf ring mein daalein. Baad mein sinchai karein."),
			),
			_dose(
				CropEnum.cotton, GrowthStageEnum.mid, 75, 40, 0, 0,
				("Second dose at flowering", "Phool aane par doosri khuraak"),
				("Critical for boll development. Avoid excess N at this stage.", "Tinde ke vikas ke liye zaroori. Is samay zyada N na dein."),
			),
			_dose(
				CropEnum.cotton, GrowthStageEnum.mid, 100, 20, 0, 0,
				("Third dose at boll formation", "Tinde banne par teesri khuraak"),
				("Light dose only. Focus on pest management.", "Sirf halki khuraak. Keet prabandhan par dhyan dein."),
			),
		),
	}
)

# ── Symptom -> diagnosis rules ──────────────────────────────────────────────

_S = SymptomEnum
_U = UrgencyEnum


def _rule(
	rule_id: str,
	symptoms: set[SymptomEnum],
	disease: str,
	prior: float,
	urgency: UrgencyEnum,
	en: str,
	hi: str,
	boosted_by: set[str] | None = None,
) -> HealthRule:
	return HealthRule(
		rule_id=rule_id,
		symptoms=frozenset(symptoms),
		disease=disease,
		prior=prior,
		urgency=urgency,
		advice=_T(en=en, hi=hi),
		boosted_by=frozenset(boosted_by or ()),
	)


HEALTH_RULES: tuple[HealthRule, ...] = (
	_rule(
		"overwatering-triad", {_S.yellow_leaves, _S.wilting, _S.root_rot}, "overwatering", 0.75, _U.soon,
		"Stop irrigation for 3-5 days and improve drainage. Apply gypsum on heavy soils.",
		"3-5 din sinchai band karein aur drainage sudhaarein. Bhaari mitti mein gypsum daalein.",
		{"high_moisture"},
	),
	_rule(
		"nitrogen-stunting", {_S.yellow_leaves, _S.stunted_growth}, "nitrogen_deficiency", 0.8, _U.soon,
		"Top dress 20-25 kg/ha urea after irrigation. Use balanced NPK next season.",
		"Sinchai ke baad 20-25 kg/ha urea top dressing karein. Agle season balanced NPK dein.",
	),
	_rule(
		"root-rot-wilt", {_S.wilting, _S.root_rot}, "root_rot", 0.85, _U.immediate,
		"Drain standing water, drench roots with Carbendazim 1 g/L and remove dead plants.",
		"Khada paani nikaalein, jadon mein Carbendazim 1 g/L daalein aur sukhe paudhe hata dein.",
		{"high_moisture"},
	),
	_rule(
		"leaf-blight", {_S.brown_spots, _S.yellow_leaves}, "leaf_blight", 0.75, _U.immediate,
		"Spray Mancozeb 2 g/L or copper oxychloride and destroy infected leaves.",
		"Mancozeb 2 g/L ya copper spray karein aur sankramit pattiyan jala dein.",
		{"high_moisture", "recent_rain"},
	),
	_rule(
		"aphid-curl", {_S.curling_leaves, _S.aphids}, "aphid_infestation", 0.9, _U.soon,
		"Spray Imidacloprid 0.3 ml/L or neem oil 5 ml/L. Use yellow sticky traps.",
		"Imidacloprid 0.3 ml/L ya neem tel 5 ml/L spray karein. Peele sticky trap lagayein.",
	),
	_rule(
		"viral-curl", {_S.curling_leaves, _S.stunted_growth}, "viral_infection", 0.65, _U.soon,
		"Uproot infected plants and control whitefly and aphid vectors.",
		"Sankramit paudhe ukhaad dein aur safed makkhi aur maahu ko control karein.",
	),
	_rule(
		"downy-mildew", {_S.white_powder, _S.yellow_leaves}, "downy_mildew", 0.7, _U.soon,
		"Spray Metalaxyl + Mancozeb 2.5 g/L. Avoid evening irrigation.",
		"Metalaxyl + Mancozeb 2.5 g/L spray karein. Shaam ko sinchai na karein.",
		{"high_moisture"},
	),
	_rule(
		"dead-heart", {_S.stem_borer, _S.yellow_leaves}, "stem_borer_infestation", 0.9, _U.immediate,
		"Apply Carbofuran granules in the leaf whorl and pull out dead hearts.",
		"Carbofuran daane patti ki gobh mein daalein aur dead heart nikaal dein.",
	),
	_rule(
		"powdery-mildew", {_S.white_powder}, "powdery_mildew", 0.9, _U.soon,
		"Spray wettable sulphur 2 g/L. Keep good air circulation.",
		"Sulphur 2 g/L spray karein. Hawa ka flow achha rakhein.",
	),
	_rule(
		"caterpillar", {_S.holes_in_leaves}, "caterpillar_attack", 0.8, _U.soon,
		"Hand pick caterpillars and spray Bt or a neem-based insecticide.",
		"Haath se caterpillar hatayein aur Bt ya neem insecticide spray karein.",
	),
	_rule(
		"stem-borer", {_S.stem_borer}, "stem_borer_infestation", 0.85, _U.immediate,
		"Spray Chlorantraniliprole and install light traps.",
		"Chlorantraniliprole spray karein aur light trap lagayein.",
	),
	_rule(
		"aphids", {_S.aphids}, "aphid_infestation", 0.95, _U.soon,
		"Spray neem oil 5 ml/L and release ladybird beetles.",
		"Neem tel 5 ml/L spray karein aur ladybug chhodein.",
	),
	_rule(
		"fungal-spots", {_S.brown_spots}, "fungal_infection", 0.75, _U.immediate,
		"Spray Mancozeb 2 g/L and avoid overhead irrigation.",
		"Mancozeb 2 g/L spray karein aur upar se paani na dein.",
		{"high_moisture", "recent_rain"},
	),
	_rule(
		"chlorosis", {_S.yellow_leaves}, "nitrogen_deficiency", 0.7, _U.soon,
		"Apply urea as a 2% foliar spray and check drainage.",
		"2% urea ka chhidkaav karein aur drainage check karein.",
	),
	_rule(
		"water-stress", {_S.wilting}, "water_stress", 0.8, _U.immediate,
		"Irrigate now and mulch to hold moisture.",
		"Turant sinchai karein aur mulching se nami bachayein.",
		{"low_moisture", "high_temperature"},
	),
	_rule(
		"leaf-curl-heat", {_S.curling_leaves}, "heat_stress", 0.55, _U.soon,
		"Irrigate in the early morning or evening and mulch the soil.",
		"Subah jaldi ya shaam ko sinchai karein aur mulch lagayein.",
		{"high_temperature"},
	),
	_rule(
		"stunting", {_S.stunted_growth}, "nutrient_deficiency", 0.7, _U.monitor,
		"Get a soil test and apply balanced NPK with micronutrients.",
		"Mitti ki jaanch karwayein aur balanced NPK ke saath micronutrient dein.",
	),
	_rule(
		"root-rot", {_S.root_rot}, "root_rot", 0.8, _U.immediate,
		"Improve drainage and drench roots with Trichoderma.",
		"Drainage sudhaarein aur jadon mein Trichoderma daalein.",
		{"high_moisture"},
	),
)

# ── Seasonal climatology (IMD, North plains) ────────────────────────────────


def _season(month: int, tmin: float, tmax: float, humidity: float, rain: float, days: int, season: SeasonEnum) -> SeasonalPattern:
	return SeasonalPattern(
		month=month,
		temp_min=tmin,
		temp_max=tmax,
		humidity=humidity,
		rainfall_mm=rain,
		rainy_days=days,
		season=season,
	)


SEASONAL_PATTERNS = MappingProxyType(
	{
		1: _season(1, 7, 21, 70, 18, 2, SeasonEnum.winter),
		2: _season(2, 10, 24, 60, 22, 2, SeasonEnum.winter),
		3: _season(3, 15, 30, 45, 15, 2, SeasonEnum.summer),
		4: _season(4, 21, 37, 35, 10, 1, SeasonEnum.summer),
		5: _season(5, 26, 41, 35, 18, 2, SeasonEnum.summer),
		6: _season(6, 28, 40, 55, 65, 5, SeasonEnum.monsoon),
		7: _season(7, 27, 35, 80, 210, 14, SeasonEnum.monsoon),
		8: _season(8, 26, 34, 82, 230, 13, SeasonEnum.monsoon),
		9: _season(9, 25, 34, 75, 130, 8, SeasonEnum.monsoon),
		10: _season(10, 19, 33, 60, 25, 2, SeasonEnum.post_monsoon),
		11: _season(11, 12, 28, 55, 5, 1, SeasonEnum.post_monsoon),
		12: _season(12, 8, 23, 65, 10, 1, SeasonEnum.winter),
	}
)
