"""Pydantic schemas for the voice command surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.models.enums import IntentEnum
from app.schemas.knowledge import BilingualText
from app.schemas.sensors import FarmContext


class VoiceCommandRequest(BaseModel):
	text: str = Field(min_length=1, max_length=500)
	farm_context: FarmContext | None = None
	symptoms: list[str] | None = Field(default=None, max_length=20)


class IntentMatch(BaseModel):
	intent: IntentEnum
	confidence: float = Field(ge=0, le=1)
	score: int = 0


class VoiceResponse(BaseModel):
	text: str
	intent: IntentEnum
	confidence: float = Field(ge=0, le=1)
	action: str | None = None
	data: dict[str, Any] | None = None


class QuickCommand(BaseModel):
	intent: IntentEnum
	label: BilingualText
	prompt: str
