from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import List

from app.schemas.base import BaseResponse
from app.services.chat_relay import chat_relay

router = APIRouter()


@router.get("/rooms", response_model=BaseResponse[List[str]])
async def get_chat_rooms():
    """Rooms with history, for the admin support panel"""
    return BaseResponse.success_response(data=chat_relay.rooms(), message="Chat rooms retrieved successfully")


async def chat_websocket(websocket: WebSocket, room: str):
    await chat_relay.join(room, websocket)
    try:
        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                # not JSON; drop the frame and keep the socket
                continue
            message = data.get("message") if isinstance(data, dict) else None
            if not message:
                continue
            await chat_relay.publish(room, message)
    except WebSocketDisconnect:
        pass
    finally:
        chat_relay.leave(room, websocket)
