"""Domain enums and bundled agronomic reference tables.

Application code can import the enums from here::

    from app.models import CropEnum, SoilEnum, IntentEnum

The tables themselves live in ``app.models.reference`` and are wrapped by
``app.services.knowledge_base.KnowledgeBase``.
"""

from app.models.enums import (
    AdvisoryTypeEnum,
    CropEnum,
    DeviceCommandEnum,
    DeviceStatusEnum,
    DiagnosisStatusEnum,
    FertilizerStatusEnum,
    GrowthStageEnum,
    InfiltrationClassEnum,
    IntentEnum,
    IrrigationStatusEnum,
    OverallHealthEnum,
    SeasonEnum,
    SensorSourceEnum,
    SoilEnum,
    SymptomEnum,
    UrgencyEnum,
    WeatherSourceEnum,
)

__all__ = [
    "AdvisoryTypeEnum",
    "CropEnum",
    "DeviceCommandEnum",
    "DeviceStatusEnum",
    "DiagnosisStatusEnum",
    "FertilizerStatusEnum",
    "GrowthStageEnum",
    "InfiltrationClassEnum",
    "IntentEnum",
    "IrrigationStatusEnum",
    "OverallHealthEnum",
    "SeasonEnum",
    "SensorSourceEnum",
    "SoilEnum",
    "SymptomEnum",
    "UrgencyEnum",
    "WeatherSourceEnum",
]
