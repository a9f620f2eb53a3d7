"""Voice command routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_voice_router
from app.schemas.voice import QuickCommand, VoiceCommandRequest, VoiceResponse
from app.services.voice_router import VoiceCommandRouter

router = APIRouter(prefix="/voice", tags=["voice"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="voice failure")


@router.post("/command", response_model=VoiceResponse)
async def process_command(
	payload: VoiceCommandRequest,
	voice: VoiceCommandRouter = Depends(get_voice_router),
) -> VoiceResponse:
	try:
		return voice.process_voice_command(payload.text, payload.farm_context, payload.symptoms)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/quick/{intent}", response_model=VoiceResponse)
async def run_quick_command(intent: str, voice: VoiceCommandRouter = Depends(get_voice_router)) -> VoiceResponse:
	try:
		return voice.run_quick_command(intent)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/quick-commands", response_model=list[QuickCommand])
async def quick_commands(voice: VoiceCommandRouter = Depends(get_voice_router)) -> list[QuickCommand]:
	return voice.get_quick_commands()
