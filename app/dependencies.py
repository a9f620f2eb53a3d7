"""Shared service wiring and FastAPI dependency providers.

The lifespan builds one set of services onto ``app.state``; routes pull them
through the providers below so tests can install their own instances.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import FastAPI, Request
from redis.asyncio import Redis

from app.config import Settings
from app.services.crop_health_engine import CropHealthEngine
from app.services.fertilizer_engine import FertilizerEngine
from app.services.irrigation_engine import IrrigationEngine
from app.services.knowledge_base import KnowledgeBase, get_knowledge_base
from app.services.sensor_service import SensorService
from app.services.voice_router import VoiceCommandRouter
from app.services.weather_engine import WeatherFallbackEngine


def install_services(
	app: FastAPI,
	settings: Settings,
	clock: Callable[[], datetime] | None = None,
	knowledge: KnowledgeBase | None = None,
) -> None:
	knowledge = knowledge or get_knowledge_base()
	sensors = SensorService(settings, clock=clock)
	weather = WeatherFallbackEngine(settings, clock=clock)
	app.state.settings = settings
	app.state.knowledge = knowledge
	app.state.sensors = sensors
	app.state.weather = weather
	app.state.irrigation = IrrigationEngine(knowledge, settings)
	app.state.fertilizer = FertilizerEngine(knowledge)
	app.state.crop_health = CropHealthEngine(knowledge)
	app.state.voice = VoiceCommandRouter(sensors, weather, knowledge, settings, clock=clock)


def get_knowledge(request: Request) -> KnowledgeBase:
	return request.app.state.knowledge


def get_sensor_service(request: Request) -> SensorService:
	return request.app.state.sensors


def get_weather_engine(request: Request) -> WeatherFallbackEngine:
	return request.app.state.weather


def get_irrigation_engine(request: Request) -> IrrigationEngine:
	return request.app.state.irrigation


def get_fertilizer_engine(request: Request) -> FertilizerEngine:
	return request.app.state.fertilizer


def get_crop_health_engine(request: Request) -> CropHealthEngine:
	return request.app.state.crop_health


def get_voice_router(request: Request) -> VoiceCommandRouter:
	return request.app.state.voice


def get_redis(request: Request) -> Redis | None:
	return getattr(request.app.state, "redis", None)
