from __future__ import annotations

from datetime import date

import pytest

from app.config import Settings
from app.models.enums import CropEnum, IntentEnum, SoilEnum, SymptomEnum
from app.schemas.sensors import FarmContext
from app.services.knowledge_base import KnowledgeBase, KnowledgeNotFoundError
from app.services.sensor_service import SensorService
from app.services.voice_router import VoiceCommandRouter, detect_crop, detect_symptoms, normalize_text
from app.services.weather_engine import WeatherFallbackEngine


@pytest.mark.parametrize(
    ("text", "intent", "confidence"),
    [
        ("paani dena hai kya", IntentEnum.irrigation, 0.667),
        ("  Aaj   KA mausam batao ", IntentEnum.weather, 0.667),
        ("khaad kab daalni hai", IntentEnum.fertilizer, 0.667),
        ("meri fasal ki haalat kharab hai, bimari lag gayi", IntentEnum.health, 0.833),
        ("kaunsa season chal raha hai", IntentEnum.general, 0.333),
    ],
)
def test_classify_intent(voice_router: VoiceCommandRouter, text: str, intent: IntentEnum, confidence: float) -> None:
    match = voice_router.classify_intent(text)
    assert match.intent == intent
    assert match.confidence == pytest.approx(confidence, abs=0.001)


def test_ties_follow_intent_priority(voice_router: VoiceCommandRouter) -> None:
    match = voice_router.classify_intent("paani aur khaad")
    assert match.intent == IntentEnum.irrigation
    assert match.score == 1


def test_unrecognised_text_is_general(voice_router: VoiceCommandRouter) -> None:
    match = voice_router.classify_intent("xyz abc")
    assert match.intent == IntentEnum.general
    assert match.confidence == 0.0


def test_default_threshold_accepts_one_loose_keyword(voice_router: VoiceCommandRouter) -> None:
    match = voice_router.classify_intent("water")
    assert match.intent == IntentEnum.irrigation
    assert match.score == 1
    assert match.confidence == pytest.approx(0.167, abs=0.001)


def test_low_confidence_falls_back_to_general(
    sensor_service: SensorService,
    weather_engine: WeatherFallbackEngine,
    knowledge: KnowledgeBase,
) -> None:
    strict = Settings(_env_file=None, min_intent_confidence=0.5)
    router = VoiceCommandRouter(sensor_service, weather_engine, knowledge, strict)
    assert router.classify_intent("water").intent == IntentEnum.general
    assert router.classify_intent("paani dena hai").intent == IntentEnum.irrigation


def test_text_helpers() -> None:
    assert normalize_text("  Paani\tDENA  ") == "paani dena"
    assert detect_crop("kapas mein paani") == CropEnum.cotton
    assert detect_crop("kuch nahi") is None
    assert detect_symptoms("patti peeli ho gayi aur murjha rahi hai") == [
        SymptomEnum.yellow_leaves,
        SymptomEnum.wilting,
    ]


def test_irrigation_answer_uses_sensor_and_weather(voice_router: VoiceCommandRouter) -> None:
    response = voice_router.process_voice_command("paani dena hai kya")

    assert response.intent == IntentEnum.irrigation
    assert response.confidence > 0.15
    assert response.data["irrigation"]["details"]["crop"] == "wheat"
    assert response.data["sensor"]["source"] == "demo"
    assert response.data["weather_source"] == "seasonal"
    assert "\n" in response.text


def test_dry_live_reading_raises_irrigation_alert(voice_router: VoiceCommandRouter, sensor_service: SensorService, clock) -> None:
    sensor_service.on_esp32_message(
        "esp-1",
        {"soil_moisture": 10.0, "temperature": 33.0, "timestamp": clock().isoformat()},
    )
    response = voice_router.process_voice_command("Aaj paani dena hai kya?")

    assert response.action == "SHOW_IRRIGATION_ALERT"
    assert response.data["irrigation"]["status"] == "irrigate"
    assert response.data["sensor"]["source"] == "live"


def test_crop_named_in_text_overrides_context(voice_router: VoiceCommandRouter) -> None:
    response = voice_router.process_voice_command("kapas mein paani dena hai kya")
    assert response.data["irrigation"]["details"]["crop"] == "cotton"


def test_explicit_farm_context(voice_router: VoiceCommandRouter) -> None:
    context = FarmContext(crop=CropEnum.rice, soil=SoilEnum.clay, sowing_date=date(2025, 4, 10))
    response = voice_router.process_voice_command("khaad kab daalni hai", farm_context=context)

    assert response.intent == IntentEnum.fertilizer
    assert response.action == "SHOW_FERTILIZER_PANEL"
    assert response.data["fertilizer"]["crop"] == "rice"
    assert response.data["fertilizer"]["status"] == "apply_now"


def test_health_without_symptoms_asks_for_them(voice_router: VoiceCommandRouter) -> None:
    response = voice_router.process_voice_command("fasal kaisi hai")
    assert response.intent == IntentEnum.health
    assert response.action == "SHOW_SYMPTOM_SELECTOR"
    assert response.data is None


def test_health_with_spoken_symptoms(voice_router: VoiceCommandRouter) -> None:
    response = voice_router.process_voice_command("patti peeli ho gayi aur murjha rahi hai")
    assert response.intent == IntentEnum.health
    assert response.action == "SHOW_HEALTH_DETAILS"
    assert response.data["diagnosis"]["primary"]["disease"] == "nitrogen_deficiency"


def test_health_with_explicit_symptoms(voice_router: VoiceCommandRouter) -> None:
    response = voice_router.process_voice_command("fasal kaisi hai", symptoms=["aphids", "curling_leaves"])
    assert response.data["diagnosis"]["primary"]["rule_id"] == "aphid-curl"


def test_general_help_and_season(voice_router: VoiceCommandRouter) -> None:
    help_response = voice_router.process_voice_command("namaste")
    assert help_response.action == "SHOW_HELP_PANEL"

    season_response = voice_router.process_voice_command("kaunsa season chal raha hai")
    assert season_response.data["season"]["season"] == "summer"


def test_engine_errors_become_error_response(voice_router: VoiceCommandRouter, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(*args: object, **kwargs: object) -> None:
        raise KnowledgeNotFoundError("no soil profile for peat")

    monkeypatch.setattr(voice_router.irrigation, "calculate_irrigation", broken)
    response = voice_router.process_voice_command("paani dena hai kya")

    assert response.intent == IntentEnum.irrigation
    assert response.action == "SHOW_ERROR"
    assert "peat" in response.data["error"]


def test_quick_commands(voice_router: VoiceCommandRouter) -> None:
    commands = voice_router.get_quick_commands()
    assert [item.intent for item in commands] == list(IntentEnum)

    response = voice_router.run_quick_command("weather")
    assert response.intent == IntentEnum.weather
    assert response.confidence == 1.0
    assert response.data["weather"]["source"] == "seasonal"

    with pytest.raises(ValueError):
        voice_router.run_quick_command("dance")
