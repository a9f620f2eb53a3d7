"""Weather with offline fallback: live reading, then cache, then climatology.

The cache is keyed by farm and written only through ``cache_weather_data``.
Every tier yields the same ``WeatherResult`` shape, so the advisory and the
irrigation factor are derived the same way regardless of where the numbers
came from.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta

import structlog

from app.config import Settings, get_settings
from app.models import reference
from app.models.enums import AdvisoryTypeEnum, SeasonEnum, WeatherSourceEnum
from app.schemas.knowledge import BilingualText
from app.schemas.weather import Advisory, SeasonalPattern, SeasonInfo, WeatherReading, WeatherResult

Clock = Callable[[], datetime]

SEASON_INFO = {
	SeasonEnum.winter: SeasonInfo(
		season=SeasonEnum.winter,
		name=BilingualText(en="Winter (Rabi)", hi="Sardi (Rabi)"),
		advice=BilingualText(
			en="Time for wheat, mustard and chickpea. Protect crops from frost.",
			hi="Gehun, sarson, chana ka time hai. Paale se bachaav rakhein.",
		),
		suggested_crops=BilingualText(en="Wheat, mustard, chickpea", hi="Gehun, sarson, chana"),
	),
	SeasonEnum.summer: SeasonInfo(
		season=SeasonEnum.summer,
		name=BilingualText(en="Summer (Zaid)", hi="Garmi (Zaid)"),
		advice=BilingualText(
			en="Crops need more water in the heat. Irrigate in the morning and evening.",
			hi="Garmi mein paani zyada lagta hai. Subah-shaam sinchai karein.",
		),
		suggested_crops=BilingualText(en="Moong, watermelon, vegetables", hi="Moong, tarbooz, sabziyan"),
	),
	SeasonEnum.monsoon: SeasonInfo(
		season=SeasonEnum.monsoon,
		name=BilingualText(en="Monsoon (Kharif)", hi="Barsaat (Kharif)"),
		advice=BilingualText(
			en="Season for paddy, maize and cotton. Keep drainage channels clear.",
			hi="Dhaan, makka, kapas ka season. Drainage pe dhyan dein.",
		),
		suggested_crops=BilingualText(en="Rice, maize, cotton", hi="Dhaan, makka, kapas"),
	),
	SeasonEnum.post_monsoon: SeasonInfo(
		season=SeasonEnum.post_monsoon,
		name=BilingualText(en="Post-monsoon", hi="Barsaat ke baad"),
		advice=BilingualText(
			en="Prepare for rabi sowing. Start ploughing the fields.",
			hi="Rabi ki taiyaari karein. Khet ki jutai shuru karein.",
		),
		suggested_crops=BilingualText(en="Wheat, mustard, potato", hi="Gehun, sarson, aalu"),
	),
}

_logger = structlog.get_logger("agriguard.weather")


def _utc(value: datetime) -> datetime:
	return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def hour_temperature_factor(hour: int) -> float:
	"""Fraction of the daily min..max range reached at a given hour."""
	if 6 <= hour < 10:
		return 0.3
	if 10 <= hour < 16:
		return 0.9
	if 16 <= hour < 20:
		return 0.6
	return 0.2


def get_weather_advisory(reading: WeatherReading) -> Advisory:
	if reading.temperature > 40:
		return Advisory(
			type=AdvisoryTypeEnum.alert,
			title=BilingualText(en="Extreme heat alert", hi="Bahut zyada garmi alert"),
			advice=BilingualText(
				en=f"Temperature {reading.temperature:g}°C. Avoid field work between 11 AM and 4 PM. Keep the crop irrigated.",
				hi=f"Temperature {reading.temperature:g}°C hai. 11 AM se 4 PM ke beech khet mein kaam mat karein. Paani dete rahein.",
			),
			actions=["Irrigate in the morning or evening only", "Apply mulch to protect roots", "Monitor for wilting"],
		)
	if reading.rain_probability_pct > 60:
		return Advisory(
			type=AdvisoryTypeEnum.caution,
			title=BilingualText(en="Rain expected", hi="Baarish aa sakti hai"),
			advice=BilingualText(
				en=f"{reading.rain_probability_pct:g}% chance of rain. Skip irrigation today and postpone spraying.",
				hi=f"{reading.rain_probability_pct:g}% baarish ka chance hai. Aaj sinchai mat karein, spray bhi kal karein.",
			),
			actions=[
				"Skip irrigation",
				"Postpone fertilizer application",
				"Postpone pesticide spraying",
				"Keep drainage channels clear",
			],
		)
	if reading.humidity > 85:
		return Advisory(
			type=AdvisoryTypeEnum.caution,
			title=BilingualText(en="High humidity, disease risk", hi="Zyada nami, bimari ka khatra"),
			advice=BilingualText(
				en=f"Humidity {reading.humidity:g}%. Fungal disease risk is high, monitor the crop closely.",
				hi=f"Nami {reading.humidity:g}% hai. Fungal bimari ka khatra hai, fasal check karte rahein.",
			),
			actions=["Avoid overhead irrigation", "Keep a preventive fungicide ready", "Monitor for fungal symptoms"],
		)
	return Advisory(
		type=AdvisoryTypeEnum.favorable,
		title=BilingualText(en="Weather favorable", hi="Mausam sahi hai"),
		advice=BilingualText(
			en=f"Good conditions for farming. Temperature {reading.temperature:g}°C, humidity {reading.humidity:g}%.",
			hi=f"Kheti ke liye achha mausam hai. Temperature {reading.temperature:g}°C, nami {reading.humidity:g}%.",
		),
		actions=["Good day for field operations", "Suitable for spraying", "Fertilizer can be applied"],
	)


def irrigation_factor(reading: WeatherReading) -> float:
	"""Multiplier applied to the recommended irrigation depth."""
	factor = 1.0
	if reading.temperature > 38:
		factor *= 1.2
	elif reading.temperature < 15:
		factor *= 0.8

	if reading.humidity > 80:
		factor *= 0.85
	elif reading.humidity < 40:
		factor *= 1.1

	if reading.rain_probability_pct > 70:
		factor *= 0.5
	elif reading.rain_probability_pct > 40:
		factor *= 0.75

	if reading.rainfall_mm > 20:
		factor *= 0.3
	elif reading.rainfall_mm > 5:
		factor *= 0.6
	return round(factor, 2)


class WeatherFallbackEngine:
	def __init__(
		self,
		settings: Settings | None = None,
		patterns: Mapping[int, SeasonalPattern] = reference.SEASONAL_PATTERNS,
		clock: Clock | None = None,
	):
		self.settings = settings or get_settings()
		self._patterns = dict(patterns)
		self._clock = clock or (lambda: datetime.now(UTC))
		self._lock = threading.Lock()
		self._cache: dict[str, WeatherReading] = {}

	@property
	def staleness(self) -> timedelta:
		return timedelta(hours=self.settings.weather_staleness_hours)

	def cache_weather_data(self, reading: WeatherReading, farm_key: str = "default") -> None:
		with self._lock:
			self._cache = {**self._cache, farm_key: reading}
		_logger.info("weather_cached", farm_key=farm_key, timestamp=reading.timestamp.isoformat())

	def get_cached(self, farm_key: str = "default") -> WeatherReading | None:
		with self._lock:
			return self._cache.get(farm_key)

	def get_weather_data(self, live: WeatherReading | None = None, farm_key: str = "default") -> WeatherResult:
		now = self._clock()
		if live is not None:
			return self._result(WeatherSourceEnum.live, live)

		cached = self.get_cached(farm_key)
		if cached is not None and now - _utc(cached.timestamp) < self.staleness:
			return self._result(WeatherSourceEnum.cached, cached)

		_logger.debug("weather_seasonal_fallback", farm_key=farm_key, has_stale_cache=cached is not None)
		return self._result(WeatherSourceEnum.seasonal, self.seasonal_fallback(now))

	def seasonal_fallback(self, at: datetime) -> WeatherReading:
		pattern = self._pattern_for(at.month)
		temp_range = pattern.temp_max - pattern.temp_min
		temperature = pattern.temp_min + temp_range * hour_temperature_factor(at.hour)
		monsoon = pattern.season == SeasonEnum.monsoon
		return WeatherReading(
			temperature=round(temperature, 1),
			humidity=pattern.humidity,
			rainfall_mm=0.0,
			rain_probability_pct=round(pattern.rainy_days / 30 * 100),
			wind_speed_kmh=15.0 if monsoon else 10.0,
			cloud_cover_pct=70.0 if monsoon else 30.0,
			is_raining=False,
			timestamp=at,
		)

	def is_raining(self, reading: WeatherReading) -> bool:
		return reading.is_raining or reading.rain_probability_pct >= self.settings.rain_skip_probability_pct

	def get_current_season(self, at: datetime | None = None) -> SeasonInfo:
		month = (at or self._clock()).month
		return SEASON_INFO[self._pattern_for(month).season]

	def _pattern_for(self, month: int) -> SeasonalPattern:
		pattern = self._patterns.get(month)
		if pattern is None:
			pattern = self._patterns[min(self._patterns)]
		return pattern

	def _result(self, source: WeatherSourceEnum, reading: WeatherReading) -> WeatherResult:
		return WeatherResult(
			source=source,
			data=reading,
			advisory=get_weather_advisory(reading),
			irrigation_factor=irrigation_factor(reading),
			season=self._pattern_for(_utc(reading.timestamp).month).season,
		)
