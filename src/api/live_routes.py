"""WebSocket endpoint hosting one live voice relay per browser connection."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as SchemaError
from starlette.websockets import WebSocketState

from api.dependencies import get_live_connector
from config.settings import get_settings
from live.browser import BrowserChannel
from live.instructions import build_system_instruction
from live.relay import LiveAudioRelay
from live.session import LiveConnector

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/live")
async def live_assistant(
    websocket: WebSocket,
    connector: LiveConnector = Depends(get_live_connector),
) -> None:
    await websocket.accept()
    channel = BrowserChannel(websocket)

    try:
        start = await channel.receive_start()
    except WebSocketDisconnect:
        return
    except (SchemaError, ValueError) as exc:
        LOGGER.warning("Rejecting live session with invalid start message: %s", exc)
        await websocket.close(code=1003)
        return

    settings = get_settings()
    relay = LiveAudioRelay(
        microphone=channel.microphone,
        connector=connector,
        playback=channel.playback,
        input_sample_rate=settings.input_sample_rate,
        output_sample_rate=settings.output_sample_rate,
        on_status=channel.post_status,
        on_turn=channel.post_turn,
    )
    sender = asyncio.create_task(channel.pump_outgoing())
    relay.open(build_system_instruction(start.language, start.analysis_result))

    try:
        await channel.pump_incoming()
    except WebSocketDisconnect:
        LOGGER.info("Live client disconnected")
    finally:
        await relay.close()
        channel.finish()
        await sender

    if websocket.client_state is WebSocketState.CONNECTED:
        await websocket.close()
