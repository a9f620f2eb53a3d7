"""Pydantic schemas for symptom-based crop diagnosis."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.enums import DiagnosisStatusEnum, OverallHealthEnum, SymptomEnum, UrgencyEnum
from app.schemas.knowledge import BilingualText

HIGH_MOISTURE_PCT = 70.0
LOW_MOISTURE_PCT = 30.0
HIGH_TEMPERATURE_C = 38.0


class FieldConditions(BaseModel):
	"""Environmental context that can raise or lower a diagnosis' likelihood."""

	soil_moisture_pct: float | None = Field(default=None, ge=0, le=100)
	temperature: float | None = None
	recent_rain: bool = False

	def tags(self) -> frozenset[str]:
		found: set[str] = set()
		if self.soil_moisture_pct is not None:
			if self.soil_moisture_pct > HIGH_MOISTURE_PCT:
				found.add("high_moisture")
			elif self.soil_moisture_pct < LOW_MOISTURE_PCT:
				found.add("low_moisture")
		if self.temperature is not None and self.temperature > HIGH_TEMPERATURE_C:
			found.add("high_temperature")
		if self.recent_rain:
			found.add("recent_rain")
		return frozenset(found)


class DiagnoseRequest(BaseModel):
	symptoms: list[str] = Field(default_factory=list, max_length=20)
	conditions: FieldConditions | None = None


class DiagnosisCandidate(BaseModel):
	disease: str
	rule_id: str
	confidence: float = Field(ge=0, le=1)
	matched_symptoms: list[SymptomEnum]
	urgency: UrgencyEnum
	advice: BilingualText


class DiagnosisResult(BaseModel):
	status: DiagnosisStatusEnum
	overall_health: OverallHealthEnum
	primary: DiagnosisCandidate | None = None
	candidates: list[DiagnosisCandidate] = Field(default_factory=list)
	advice: BilingualText
	ignored_symptoms: list[str] = Field(default_factory=list)


class SymptomInfo(BaseModel):
	symptom: SymptomEnum
	label: BilingualText
