"""Voice command router: transcribed text in, one bilingual advisory out.

Pipeline: normalize -> classify intent -> gather context -> call exactly one
engine -> compose the response. Intent classification is table driven; adding
an intent means adding rows to ``INTENT_PATTERNS`` and a handler.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, NamedTuple

import structlog

from app.config import Settings, get_settings
from app.models.enums import (
	CropEnum,
	DiagnosisStatusEnum,
	FertilizerStatusEnum,
	IntentEnum,
	IrrigationStatusEnum,
	SymptomEnum,
	WeatherSourceEnum,
)
from app.schemas.crop_health import FieldConditions
from app.schemas.knowledge import BilingualText
from app.schemas.sensors import FarmContext
from app.schemas.voice import IntentMatch, QuickCommand, VoiceResponse
from app.services.crop_health_engine import SYMPTOM_LABELS, CropHealthEngine
from app.services.fertilizer_engine import FertilizerEngine
from app.services.irrigation_engine import IrrigationEngine
from app.services.knowledge_base import KnowledgeBase, get_knowledge_base
from app.services.sensor_service import SensorService
from app.services.weather_engine import WeatherFallbackEngine


class IntentPattern(NamedTuple):
	intent: IntentEnum
	pattern: re.Pattern[str]
	weight: int


def _p(intent: IntentEnum, regex: str, weight: int) -> IntentPattern:
	return IntentPattern(intent, re.compile(regex), weight)


# Phrases score 3, strong single words 2, loose keywords 1.
INTENT_PATTERNS: tuple[IntentPattern, ...] = (
	_p(
		IntentEnum.irrigation,
		r"\b(paani|pani|water)\s+(dena|doon|de|dein|do|lagana|lagaun|needed)\b|\bkitna\s+paani\b|\bhow\s+much\s+water\b",
		3,
	),
	_p(
		IntentEnum.irrigation,
		r"\bsinchai\s+(karu|karna|karni|karein|kab|kitni)\b|\birrigat\w*\s+(today|now|karna|karein|needed)\b|\baaj\s+paani\b",
		2,
	),
	_p(IntentEnum.irrigation, r"\b(paani|pani|sinchai|irrigation|irrigate|water|nami|moisture)\b|सिंचाई|पानी", 1),
	_p(
		IntentEnum.fertilizer,
		r"\b(khaad|khad|fertili[sz]er)\s+(dena|doon|daal\w*|advice|kab|kitna|kitni|batao|do)\b",
		3,
	),
	_p(IntentEnum.fertilizer, r"\b(urea|dap|npk|mop|potash)\b|यूरिया", 2),
	_p(IntentEnum.fertilizer, r"\b(khaad|khad|fertili[sz]er|nutrients?)\b|खाद|उर्वरक", 1),
	_p(
		IntentEnum.health,
		r"\bfasal\s+(ka|ki)\s+(health|haalat|condition)\b|\bcrop\s+health\b|\bkya\s+problem\b|\bfasal\s+kaisi\b",
		3,
	),
	_p(IntentEnum.health, r"\b(bimari|disease|rog|keede?|keet|pests?|insects?)\b|बीमारी|रोग", 2),
	_p(IntentEnum.health, r"\b(patti|pattiyan|leaf|leaves|peeli|peela|yellow|murjha\w*|wilt\w*|dhabbe|spots?)\b|पत्ती", 1),
	_p(
		IntentEnum.weather,
		r"\baaj\s+ka\s+mausam\b|\bweather\s+(today|forecast|batao)\b|\b(baarish|barish)\s+(aayegi|hogi|expected)\b",
		3,
	),
	_p(IntentEnum.weather, r"\b(baarish|barish|rain\w*)\b|बारिश", 2),
	_p(IntentEnum.weather, r"\b(mausam|weather|temperature|garmi|thand)\b|मौसम", 1),
	_p(IntentEnum.general, r"\b(namaste|namaskar|hello|hi|hey)\b|\bgood\s+(morning|evening|afternoon)\b|नमस्ते", 2),
	_p(IntentEnum.general, r"\b(help|madad|sahayata|commands)\b|\bkya\s+kar\s+sakte\b|मदद", 2),
	_p(IntentEnum.general, r"\b(season|ritu|rabi|kharif|zaid)\b", 2),
)

INTENT_PRIORITY = tuple(IntentEnum)

CROP_PATTERNS: tuple[tuple[re.Pattern[str], CropEnum], ...] = (
	(re.compile(r"\b(wheat|gehun|gehu|gehoon)\b|गेहूं"), CropEnum.wheat),
	(re.compile(r"\b(rice|paddy|dhan|dhaan|chawal)\b|धान"), CropEnum.rice),
	(re.compile(r"\b(cotton|kapas)\b|कपास"), CropEnum.cotton),
)

SYMPTOM_PATTERNS: tuple[tuple[re.Pattern[str], SymptomEnum], ...] = (
	(re.compile(r"\b(yellow|peel[aie])\b|पीला|पीली"), SymptomEnum.yellow_leaves),
	(re.compile(r"\b(brown|bhur[ae]|dhabb[ae]|spots?)\b|धब्बे"), SymptomEnum.brown_spots),
	(re.compile(r"\b(wilt\w*|murjha\w*|sukh\w*)|मुरझा"), SymptomEnum.wilting),
	(re.compile(r"\b(curl\w*|mud\s+(gayi|gaye|rahi|rahe)|mudi|mudna)\b"), SymptomEnum.curling_leaves),
	(re.compile(r"\b(white\s+powder|safed|powder)\b"), SymptomEnum.white_powder),
	(re.compile(r"\b(holes?|chhed)\b|छेद"), SymptomEnum.holes_in_leaves),
	(re.compile(r"\b(stunted|badh\s+nahi|growth\s+ruk\w*)"), SymptomEnum.stunted_growth),
	(re.compile(r"\b(root\s*rot|jad\s*sad\w*|jadein\s+sad\w*)"), SymptomEnum.root_rot),
	(re.compile(r"\b(stem\s*borer|tana\s*chhedak|dead\s*heart)"), SymptomEnum.stem_borer),
	(re.compile(r"\b(aphids?|maahu|mahu|chepa)\b"), SymptomEnum.aphids),
)

QUICK_COMMANDS = (
	QuickCommand(intent=IntentEnum.irrigation, label=BilingualText(en="Check irrigation", hi="Sinchai check"), prompt="Aaj paani dena hai kya?"),
	QuickCommand(intent=IntentEnum.fertilizer, label=BilingualText(en="Fertilizer advice", hi="Khaad salah"), prompt="Khaad kab daalni hai?"),
	QuickCommand(intent=IntentEnum.health, label=BilingualText(en="Crop health", hi="Fasal ki sehat"), prompt="Fasal kaisi hai?"),
	QuickCommand(intent=IntentEnum.weather, label=BilingualText(en="Weather check", hi="Mausam"), prompt="Aaj ka mausam batao"),
	QuickCommand(intent=IntentEnum.general, label=BilingualText(en="Help", hi="Madad"), prompt="Madad chahiye"),
)

HELP_TEXT = BilingualText(
	en=(
		"You can ask: \"Do I need to water today?\", \"Fertilizer advice\", "
		"\"How is my crop?\", \"What is the weather?\""
	),
	hi=(
		"Aap pooch sakte hain: \"Aaj paani dena hai kya?\", \"Khaad kab daalni hai?\", "
		"\"Fasal kaisi hai?\", \"Aaj ka mausam batao\""
	),
)

_WHITESPACE = re.compile(r"\s+")
_SEASON_WORDS = re.compile(r"\b(season|ritu|rabi|kharif|zaid)\b")

_logger = structlog.get_logger("agriguard.voice")


def normalize_text(text: str) -> str:
	return _WHITESPACE.sub(" ", text.strip().casefold())


def detect_crop(text: str) -> CropEnum | None:
	for pattern, crop in CROP_PATTERNS:
		if pattern.search(text):
			return crop
	return None


def detect_symptoms(text: str) -> list[SymptomEnum]:
	return [symptom for pattern, symptom in SYMPTOM_PATTERNS if pattern.search(text)]


def _max_scores(patterns: Iterable[IntentPattern]) -> dict[IntentEnum, int]:
	totals: dict[IntentEnum, int] = {}
	for row in patterns:
		totals[row.intent] = totals.get(row.intent, 0) + row.weight
	return totals


class VoiceCommandRouter:
	def __init__(
		self,
		sensors: SensorService,
		weather: WeatherFallbackEngine,
		knowledge: KnowledgeBase | None = None,
		settings: Settings | None = None,
		clock: Callable[[], datetime] | None = None,
		patterns: tuple[IntentPattern, ...] = INTENT_PATTERNS,
	):
		self.sensors = sensors
		self.weather = weather
		self.knowledge = knowledge or get_knowledge_base()
		self.settings = settings or get_settings()
		self._clock = clock or (lambda: datetime.now(UTC))
		self.patterns = patterns
		self._max_scores = _max_scores(patterns)
		self.irrigation = IrrigationEngine(self.knowledge, self.settings)
		self.fertilizer = FertilizerEngine(self.knowledge)
		self.health = CropHealthEngine(self.knowledge)
		self._handlers: dict[IntentEnum, Callable[..., VoiceResponse]] = {
			IntentEnum.irrigation: self._handle_irrigation,
			IntentEnum.fertilizer: self._handle_fertilizer,
			IntentEnum.health: self._handle_health,
			IntentEnum.weather: self._handle_weather,
			IntentEnum.general: self._handle_general,
		}

	def classify_intent(self, text: str) -> IntentMatch:
		normalized = normalize_text(text)
		scores = {intent: 0 for intent in self._max_scores}
		for row in self.patterns:
			if row.pattern.search(normalized):
				scores[row.intent] += row.weight

		best = max(scores, key=lambda intent: (scores[intent], -INTENT_PRIORITY.index(intent)))
		score = scores[best]
		confidence = round(score / self._max_scores[best], 3) if score else 0.0
		if score == 0 or confidence < self.settings.min_intent_confidence:
			general_score = scores.get(IntentEnum.general, 0)
			general_max = self._max_scores.get(IntentEnum.general, 0)
			general_confidence = round(general_score / general_max, 3) if general_max else 0.0
			return IntentMatch(intent=IntentEnum.general, confidence=general_confidence, score=general_score)
		return IntentMatch(intent=best, confidence=confidence, score=score)

	def process_voice_command(
		self,
		text: str,
		farm_context: FarmContext | None = None,
		symptoms: Iterable[str] | None = None,
	) -> VoiceResponse:
		normalized = normalize_text(text)
		match = self.classify_intent(normalized)
		context = farm_context or self.sensors.get_farm_context()
		crop = detect_crop(normalized) or context.crop
		_logger.info("voice_intent_resolved", intent=match.intent.value, confidence=match.confidence, score=match.score)
		return self._dispatch(match, context, crop, normalized, symptoms)

	def run_quick_command(self, intent: IntentEnum | str) -> VoiceResponse:
		"""Answer a quick command with the stored farm context, skipping text parsing."""
		try:
			intent = IntentEnum(intent)
		except ValueError:
			raise ValueError(f"unknown quick command intent: {intent}") from None
		context = self.sensors.get_farm_context()
		match = IntentMatch(intent=intent, confidence=1.0, score=0)
		return self._dispatch(match, context, context.crop, "", None)

	def get_quick_commands(self) -> list[QuickCommand]:
		return list(QUICK_COMMANDS)

	def _dispatch(
		self,
		match: IntentMatch,
		context: FarmContext,
		crop: CropEnum,
		text: str,
		symptoms: Iterable[str] | None,
	) -> VoiceResponse:
		handler = self._handlers[match.intent]
		try:
			return handler(match=match, context=context, crop=crop, text=text, symptoms=symptoms)
		except (LookupError, ValueError) as exc:
			_logger.warning("voice_engine_error", intent=match.intent.value, error=str(exc))
			message = BilingualText(
				en=f"Sorry, I could not work that out: {exc}. Please check the farm settings.",
				hi="Maaf kijiye, jawab nahi ban paya. Kripya khet ki jaankari check karein.",
			)
			return VoiceResponse(
				text=message.joined(),
				intent=match.intent,
				confidence=match.confidence,
				action="SHOW_ERROR",
				data={"error": str(exc)},
			)

	# ── Handlers ────────────────────────────────────────────────────────────

	def _handle_irrigation(self, *, match: IntentMatch, context: FarmContext, crop: CropEnum, **_: Any) -> VoiceResponse:
		reading = self.sensors.get_sensor_data()
		weather = self.weather.get_weather_data(farm_key=context.farm_id or "default")
		result = self.irrigation.calculate_irrigation(
			crop,
			context.soil,
			self.sensors.days_since_sowing(context),
			reading.soil_moisture_pct,
			self._clock().month,
			is_raining=self.weather.is_raining(weather.data),
			weather_factor=weather.irrigation_factor,
			plot_size_ha=context.plot_size_ha,
		)

		en, hi = [result.reason.en], [result.reason.hi]
		en.append(f"Soil moisture {reading.soil_moisture_pct:g}% ({reading.source.value} reading).")
		hi.append(f"Mitti ki nami {reading.soil_moisture_pct:g}% ({reading.source.value} data).")
		if result.water_saved_liters:
			en.append(f"Skipping today saves about {result.water_saved_liters:,.0f} litres.")
			hi.append(f"Aaj skip karke lagbhag {result.water_saved_liters:,.0f} litre paani bachega.")

		return VoiceResponse(
			text=BilingualText(en=" ".join(en), hi=" ".join(hi)).joined(),
			intent=IntentEnum.irrigation,
			confidence=match.confidence,
			action="SHOW_IRRIGATION_ALERT" if result.status == IrrigationStatusEnum.irrigate else None,
			data={
				"irrigation": result.model_dump(mode="json"),
				"sensor": reading.model_dump(mode="json"),
				"weather_source": weather.source.value,
			},
		)

	def _handle_fertilizer(self, *, match: IntentMatch, context: FarmContext, crop: CropEnum, **_: Any) -> VoiceResponse:
		result = self.fertilizer.calculate_fertilizer(crop, context.soil, self.sensors.days_since_sowing(context))
		text = result.reason
		if result.status == FertilizerStatusEnum.apply_now and result.tips is not None:
			text = BilingualText(en=f"{text.en} {result.tips.en}", hi=f"{text.hi} {result.tips.hi}")
		return VoiceResponse(
			text=text.joined(),
			intent=IntentEnum.fertilizer,
			confidence=match.confidence,
			action="SHOW_FERTILIZER_PANEL",
			data={"fertilizer": result.model_dump(mode="json")},
		)

	def _handle_health(
		self,
		*,
		match: IntentMatch,
		context: FarmContext,
		text: str,
		symptoms: Iterable[str] | None,
		**_: Any,
	) -> VoiceResponse:
		observed = list(symptoms) if symptoms is not None else [item.value for item in detect_symptoms(text)]
		if not observed:
			choices = BilingualText(
				en="What is wrong with the crop? Tell me the symptoms: " + ", ".join(label.en.lower() for label in SYMPTOM_LABELS.values()) + ".",
				hi="Fasal mein kya problem hai? Lakshan batayein: " + ", ".join(label.hi.lower() for label in SYMPTOM_LABELS.values()) + ".",
			)
			return VoiceResponse(
				text=choices.joined(),
				intent=IntentEnum.health,
				confidence=match.confidence,
				action="SHOW_SYMPTOM_SELECTOR",
			)

		reading = self.sensors.get_sensor_data()
		weather = self.weather.get_weather_data(farm_key=context.farm_id or "default")
		conditions = FieldConditions(
			soil_moisture_pct=reading.soil_moisture_pct,
			temperature=reading.temperature,
			recent_rain=weather.data.is_raining or weather.data.rainfall_mm > 0,
		)
		result = self.health.diagnose_crop_health(observed, conditions)
		if result.status == DiagnosisStatusEnum.diagnosed and result.primary is not None:
			name = result.primary.disease.replace("_", " ")
			percent = round(result.primary.confidence * 100)
			message = BilingualText(
				en=f"Likely {name} ({percent}% confidence). {result.advice.en}",
				hi=f"{name} ho sakta hai ({percent}% sambhavna). {result.advice.hi}",
			)
		else:
			message = result.advice
		return VoiceResponse(
			text=message.joined(),
			intent=IntentEnum.health,
			confidence=match.confidence,
			action="SHOW_HEALTH_DETAILS",
			data={"diagnosis": result.model_dump(mode="json")},
		)

	def _handle_weather(self, *, match: IntentMatch, context: FarmContext, **_: Any) -> VoiceResponse:
		result = self.weather.get_weather_data(farm_key=context.farm_id or "default")
		data = result.data
		source_note = {
			WeatherSourceEnum.live: BilingualText(en="Live weather.", hi="Live mausam."),
			WeatherSourceEnum.cached: BilingualText(en="Cached weather.", hi="Purana saved mausam."),
			WeatherSourceEnum.seasonal: BilingualText(en="Seasonal estimate, offline mode.", hi="Mausami anumaan, offline mode."),
		}[result.source]
		message = BilingualText(
			en=(
				f"{source_note.en} Temperature {data.temperature:g}°C, humidity {data.humidity:g}%, "
				f"rain chance {data.rain_probability_pct:g}%. {result.advisory.title.en}: {result.advisory.advice.en}"
			),
			hi=(
				f"{source_note.hi} Temperature {data.temperature:g}°C, nami {data.humidity:g}%, "
				f"baarish ka chance {data.rain_probability_pct:g}%. {result.advisory.title.hi}: {result.advisory.advice.hi}"
			),
		)
		return VoiceResponse(
			text=message.joined(),
			intent=IntentEnum.weather,
			confidence=match.confidence,
			data={"weather": result.model_dump(mode="json")},
		)

	def _handle_general(self, *, match: IntentMatch, text: str, **_: Any) -> VoiceResponse:
		if _SEASON_WORDS.search(text):
			season = self.weather.get_current_season(self._clock())
			message = BilingualText(
				en=f"Current season: {season.name.en}. {season.advice.en} Suggested crops: {season.suggested_crops.en}.",
				hi=f"Abhi ka season: {season.name.hi}. {season.advice.hi} Sujhaayi faslein: {season.suggested_crops.hi}.",
			)
			return VoiceResponse(
				text=message.joined(),
				intent=IntentEnum.general,
				confidence=match.confidence,
				data={"season": season.model_dump(mode="json")},
			)
		return VoiceResponse(
			text=HELP_TEXT.joined(),
			intent=IntentEnum.general,
			confidence=match.confidence,
			action="SHOW_HELP_PANEL",
		)
