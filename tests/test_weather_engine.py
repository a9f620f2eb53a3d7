from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from app.models.enums import AdvisoryTypeEnum, SeasonEnum, WeatherSourceEnum
from app.schemas.weather import WeatherReading
from app.services.weather_engine import (
    WeatherFallbackEngine,
    get_weather_advisory,
    hour_temperature_factor,
    irrigation_factor,
)


def _reading(at: datetime, **overrides: object) -> WeatherReading:
    values: dict[str, object] = {"temperature": 31.0, "humidity": 50.0, "timestamp": at}
    values.update(overrides)
    return WeatherReading(**values)


def test_seasonal_fallback_without_cache(weather_engine: WeatherFallbackEngine) -> None:
    result = weather_engine.get_weather_data()

    assert result.source == WeatherSourceEnum.seasonal
    assert result.season == SeasonEnum.summer
    # April: 21..37 °C, morning factor 0.3
    assert result.data.temperature == pytest.approx(25.8)
    assert result.data.humidity == 35
    assert result.data.rain_probability_pct == 3
    assert result.data.is_raining is False


def test_cached_reading_is_returned_unchanged(weather_engine: WeatherFallbackEngine, clock) -> None:
    reading = _reading(clock(), rain_probability_pct=45.0)
    weather_engine.cache_weather_data(reading)

    result = weather_engine.get_weather_data()
    assert result.source == WeatherSourceEnum.cached
    assert result.data == reading
    assert result.irrigation_factor == pytest.approx(0.75)


def test_cache_goes_stale(weather_engine: WeatherFallbackEngine, clock) -> None:
    weather_engine.cache_weather_data(_reading(clock()))
    clock.advance(hours=23, minutes=59)
    assert weather_engine.get_weather_data().source == WeatherSourceEnum.cached

    clock.advance(minutes=2)
    result = weather_engine.get_weather_data()
    assert result.source == WeatherSourceEnum.seasonal
    assert weather_engine.get_cached() is not None


def test_naive_timestamps_are_treated_as_utc(weather_engine: WeatherFallbackEngine, clock) -> None:
    naive = clock().replace(tzinfo=None) - timedelta(hours=1)
    weather_engine.cache_weather_data(_reading(naive))
    assert weather_engine.get_weather_data().source == WeatherSourceEnum.cached


def test_cache_is_keyed_by_farm(weather_engine: WeatherFallbackEngine, clock) -> None:
    weather_engine.cache_weather_data(_reading(clock(), temperature=29.0), farm_key="north")

    assert weather_engine.get_weather_data(farm_key="north").data.temperature == 29.0
    assert weather_engine.get_weather_data(farm_key="south").source == WeatherSourceEnum.seasonal


def test_live_reading_takes_precedence(weather_engine: WeatherFallbackEngine, clock) -> None:
    weather_engine.cache_weather_data(_reading(clock(), temperature=29.0))
    live = _reading(clock(), temperature=33.0)

    result = weather_engine.get_weather_data(live)
    assert result.source == WeatherSourceEnum.live
    assert result.data.temperature == 33.0


def test_rain_detection(weather_engine: WeatherFallbackEngine, clock) -> None:
    now = clock()
    assert weather_engine.is_raining(_reading(now, rain_probability_pct=70.0)) is True
    assert weather_engine.is_raining(_reading(now, rain_probability_pct=69.0)) is False
    assert weather_engine.is_raining(_reading(now, is_raining=True, rain_probability_pct=0.0)) is True


@pytest.mark.parametrize(
    ("month", "expected"),
    [(1, SeasonEnum.winter), (4, SeasonEnum.summer), (7, SeasonEnum.monsoon), (10, SeasonEnum.post_monsoon)],
)
def test_current_season(weather_engine: WeatherFallbackEngine, month: int, expected: SeasonEnum) -> None:
    info = weather_engine.get_current_season(datetime(2025, month, 10, tzinfo=UTC))
    assert info.season == expected
    assert info.advice.en and info.advice.hi


def test_advisory_priorities(clock) -> None:
    now = clock()
    assert get_weather_advisory(_reading(now, temperature=42.0, rain_probability_pct=90.0)).type == AdvisoryTypeEnum.alert
    assert get_weather_advisory(_reading(now, rain_probability_pct=65.0)).type == AdvisoryTypeEnum.caution
    assert get_weather_advisory(_reading(now, humidity=90.0)).type == AdvisoryTypeEnum.caution
    favorable = get_weather_advisory(_reading(now, temperature=25.0, humidity=60.0, rain_probability_pct=20.0))
    assert favorable.type == AdvisoryTypeEnum.favorable
    assert favorable.actions


def test_irrigation_factor(clock) -> None:
    now = clock()
    assert irrigation_factor(_reading(now, temperature=25.0, humidity=60.0)) == 1.0
    harsh = _reading(now, temperature=40.0, humidity=30.0, rain_probability_pct=80.0, rainfall_mm=10.0)
    assert irrigation_factor(harsh) == pytest.approx(0.4)


def test_hour_factor_bands() -> None:
    assert hour_temperature_factor(3) == 0.2
    assert hour_temperature_factor(8) == 0.3
    assert hour_temperature_factor(13) == 0.9
    assert hour_temperature_factor(18) == 0.6
    assert hour_temperature_factor(22) == 0.2
