"""방 실시간 동기화 WebSocket

연결 직후 스냅샷 1건을 보내고 이후에는 해당 방의 변경 알림만 전달한다.
구독을 스냅샷 조회보다 먼저 등록하므로 그 사이의 변경은 유실되지 않는다
(중복 알림은 클라이언트가 재조회로 흡수).
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import RoomNotFoundError
from app.models.base import get_db
from app.services import participant_service, room_service
from app.services.change_feed import Subscription, change_feed, room_code_predicate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])

LIVE_TABLES = {"rooms", "participants", "answers"}
ROOM_NOT_FOUND_CLOSE_CODE = 4404


async def build_snapshot(session: AsyncSession, room_code: str) -> dict:
    """방 + 참가자 목록 스냅샷"""
    room = await room_service.get_room_response(session, room_code)
    participants = await participant_service.list_by_room(session, room_code)
    return {
        "type": "snapshot",
        "room": room.model_dump(mode="json"),
        "participants": [p.model_dump(mode="json") for p in participants.participants],
    }


async def _forward_changes(websocket: WebSocket, subscription: Subscription) -> None:
    async for event in subscription:
        await websocket.send_json(event.to_message())


async def _drain_client(websocket: WebSocket) -> None:
    # 클라이언트 메시지는 사용하지 않고 연결 종료 감지만 한다
    while True:
        await websocket.receive_text()


@router.websocket("/rooms/{room_code}/live")
async def room_live(
    websocket: WebSocket,
    room_code: str,
    db: AsyncSession = Depends(get_db),
):
    """방 변경 알림 스트림"""
    await websocket.accept()
    subscription = change_feed.subscribe(tables=LIVE_TABLES, predicate=room_code_predicate(room_code))
    try:
        try:
            snapshot = await build_snapshot(db, room_code)
        except RoomNotFoundError:
            logger.info(f"실시간 연결 거부 (방 없음): room_code={room_code}")
            await websocket.close(code=ROOM_NOT_FOUND_CLOSE_CODE)
            return
        finally:
            # 연결 동안 DB 커넥션을 잡아두지 않음
            await db.close()

        await websocket.send_json(snapshot)
        logger.info(f"실시간 연결: room_code={room_code}, subscribers={change_feed.subscriber_count}")

        tasks = [
            asyncio.create_task(_forward_changes(websocket, subscription)),
            asyncio.create_task(_drain_client(websocket)),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.error(f"실시간 연결 오류: room_code={room_code}, error={exc}", exc_info=exc)
    finally:
        subscription.close()
        logger.info(f"실시간 연결 종료: room_code={room_code}")
