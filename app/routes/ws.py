"""WebSocket live feed of device readings."""

from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.live_feed import LIVE_CHANNEL

router = APIRouter(tags=["websocket"])


def _decode(payload: object) -> object:
	if isinstance(payload, bytes):
		payload = payload.decode("utf-8")
	if isinstance(payload, str):
		try:
			return json.loads(payload)
		except json.JSONDecodeError:
			return payload
	return payload


@router.websocket("/ws/devices/live")
async def ws_device_feed(websocket: WebSocket) -> None:
	await websocket.accept()

	redis_client = getattr(websocket.app.state, "redis", None)
	if redis_client is None:
		await websocket.send_json({"error": "live_feed_unavailable"})
		await websocket.close(code=1011)
		return

	device_filter = (websocket.query_params.get("device_id") or "").strip() or None
	pubsub = redis_client.pubsub()
	await pubsub.subscribe(LIVE_CHANNEL)

	try:
		while True:
			message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
			if message is not None and message.get("type") == "message":
				event = _decode(message.get("data"))
				if isinstance(event, dict):
					if device_filter is None or event.get("device_id") == device_filter:
						await websocket.send_json(event)
				elif isinstance(event, str):
					await websocket.send_text(event)
			await asyncio.sleep(0.05)
	except WebSocketDisconnect:
		return
	finally:
		await pubsub.unsubscribe(LIVE_CHANNEL)
		await pubsub.close()
