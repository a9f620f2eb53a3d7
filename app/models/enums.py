"""Enumerations shared by the reference tables, engines and API schemas.

Values are the wire tokens used in payloads and responses, so they must stay
stable across releases.
"""

from enum import StrEnum

# ── Reference data enums ────────────────────────────────────────────────────


class CropEnum(StrEnum):
    """Crops covered by the reference tables."""

    wheat = "wheat"
    rice = "rice"
    cotton = "cotton"


class GrowthStageEnum(StrEnum):
    """FAO-56 growth stages, in sowing order."""

    initial = "initial"
    development = "development"
    mid = "mid"
    late = "late"


class SoilEnum(StrEnum):
    """Soil textures with hydraulic reference values."""

    sandy = "sandy"
    loamy = "loamy"
    clay = "clay"
    black = "black"


class InfiltrationClassEnum(StrEnum):
    fast = "fast"
    moderate = "moderate"
    slow = "slow"
    very_slow = "very_slow"


class SymptomEnum(StrEnum):
    """Field-observable symptom tags matched by the crop-health rules."""

    yellow_leaves = "yellow_leaves"
    brown_spots = "brown_spots"
    wilting = "wilting"
    curling_leaves = "curling_leaves"
    white_powder = "white_powder"
    holes_in_leaves = "holes_in_leaves"
    stunted_growth = "stunted_growth"
    root_rot = "root_rot"
    stem_borer = "stem_borer"
    aphids = "aphids"


class UrgencyEnum(StrEnum):
    immediate = "immediate"
    soon = "soon"
    monitor = "monitor"


# ── Engine outcome enums ────────────────────────────────────────────────────


class IrrigationStatusEnum(StrEnum):
    """Irrigation decision outcome."""

    irrigate = "irrigate"
    stop = "stop"
    skip = "skip"
    normal = "normal"


class FertilizerStatusEnum(StrEnum):
    apply_now = "apply_now"
    upcoming = "upcoming"
    no_action = "no_action"


class DiagnosisStatusEnum(StrEnum):
    diagnosed = "diagnosed"
    insufficient_signal = "insufficient_signal"


class OverallHealthEnum(StrEnum):
    healthy = "healthy"
    moderate = "moderate"
    poor = "poor"
    critical = "critical"


class AdvisoryTypeEnum(StrEnum):
    favorable = "favorable"
    caution = "caution"
    alert = "alert"


class SeasonEnum(StrEnum):
    winter = "winter"
    summer = "summer"
    monsoon = "monsoon"
    post_monsoon = "post_monsoon"


# ── Data provenance enums ───────────────────────────────────────────────────


class SensorSourceEnum(StrEnum):
    """Which fallback tier produced a sensor reading."""

    live = "live"
    cached = "cached"
    demo = "demo"


class WeatherSourceEnum(StrEnum):
    """Which fallback tier produced a weather reading."""

    live = "live"
    cached = "cached"
    seasonal = "seasonal"


class DeviceStatusEnum(StrEnum):
    connected = "connected"
    disconnected = "disconnected"
    error = "error"


class DeviceCommandEnum(StrEnum):
    """Commands understood by field controller firmware."""

    start_irrigation = "start_irrigation"
    stop_irrigation = "stop_irrigation"
    get_status = "get_status"
    calibrate = "calibrate"


# ── Voice enums ─────────────────────────────────────────────────────────────


class IntentEnum(StrEnum):
    """Intents recognised by the voice command router, in tie-break priority."""

    irrigation = "irrigation"
    fertilizer = "fertilizer"
    health = "health"
    weather = "weather"
    general = "general"
