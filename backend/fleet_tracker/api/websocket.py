"""
WebSocket 엔드포인트 — 실시간 차량 위치 Push
클라이언트가 /ws/realtime에 연결하면 다음 이벤트를 받는다:
  - driverUpdate: 매 틱 전체 차량 GeoJSON FeatureCollection
  - orderUpdate: 주문 배정 / 픽업 / 배송 완료 시

연결마다 전용 송신 태스크를 두고, driverUpdate는 최신 프레임 슬롯 하나만 유지한다.
느린 연결은 자기 프레임만 덮어쓰여 생략되며 다른 연결의 전송에는 영향이 없다.
"""

import asyncio
import json
import logging
from collections import deque
from contextlib import suppress
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()

DRIVER_UPDATE = "driverUpdate"
ORDER_UPDATE = "orderUpdate"


class Subscriber:
    """연결 하나의 송신 상태 (최신 프레임 슬롯 + 이벤트 큐)"""

    def __init__(self, websocket: WebSocket, max_pending_events: int = 100):
        self.websocket = websocket
        self.latest_frame: str | None = None
        self.events: deque[str] = deque(maxlen=max_pending_events)
        self.wakeup = asyncio.Event()
        self.task: asyncio.Task | None = None
        self.frames_sent = 0
        self.frames_dropped = 0

    def offer_frame(self, text: str) -> bool:
        """최신 프레임 교체. 아직 전송되지 않은 이전 프레임이 있으면 False"""
        replaced = self.latest_frame is not None
        if replaced:
            self.frames_dropped += 1
        self.latest_frame = text
        self.wakeup.set()
        return not replaced

    def offer_event(self, text: str):
        self.events.append(text)
        self.wakeup.set()

    def next_message(self) -> str | None:
        # 이벤트가 프레임보다 먼저 나간다
        if self.events:
            return self.events.popleft()
        text, self.latest_frame = self.latest_frame, None
        return text


class ConnectionManager:
    """WebSocket 구독자 관리 — 같은 스냅샷을 모든 연결에 넘기고, 전송은 연결별로 진행한다."""

    def __init__(self, send_timeout: float = 1.0):
        self.send_timeout = send_timeout
        self._subscribers: list[Subscriber] = []
        self.frames_dropped = 0

    @property
    def active_connections(self) -> list[WebSocket]:
        return [s.websocket for s in self._subscribers]

    def _find(self, websocket: WebSocket) -> Subscriber | None:
        for subscriber in self._subscribers:
            if subscriber.websocket is websocket:
                return subscriber
        return None

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        subscriber = Subscriber(websocket)
        subscriber.task = asyncio.create_task(self._sender(subscriber), name="ws-sender")
        self._subscribers.append(subscriber)
        logger.info(f"WebSocket 연결: {len(self._subscribers)}개 활성")

    def disconnect(self, websocket: WebSocket):
        subscriber = self._find(websocket)
        if subscriber is None:
            return
        self._subscribers.remove(subscriber)
        task = subscriber.task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        logger.info(f"WebSocket 해제: {len(self._subscribers)}개 활성")

    async def _send(self, websocket: WebSocket, text: str) -> bool:
        try:
            await asyncio.wait_for(websocket.send_text(text), timeout=self.send_timeout)
            return True
        except Exception as e:
            logger.debug(f"WebSocket 전송 실패 ({type(e).__name__}) — 연결 종료")
            return False

    async def _sender(self, subscriber: Subscriber):
        """연결 전용 송신 루프 — 실패/타임아웃 시 연결을 닫고 종료한다."""
        while True:
            await subscriber.wakeup.wait()
            subscriber.wakeup.clear()
            while True:
                text = subscriber.next_message()
                if text is None:
                    break
                if not await self._send(subscriber.websocket, text):
                    await self._drop(subscriber)
                    return
                subscriber.frames_sent += 1

    async def _drop(self, subscriber: Subscriber):
        self.disconnect(subscriber.websocket)
        # 전송 중 취소된 프레임이 남았을 수 있으므로 연결을 닫아 클라이언트가 재접속하게 한다
        with suppress(Exception):
            await subscriber.websocket.close()

    async def broadcast(self, message: dict, latest_only: bool = False):
        """
        모든 연결의 송신 큐에 메시지를 넣고 바로 반환한다.
        latest_only=True면 연결별 최신 프레임 슬롯을 덮어쓴다 (미전송 프레임은 생략).
        """
        if not self._subscribers:
            return

        text = json.dumps(message, ensure_ascii=False, default=str)
        for subscriber in list(self._subscribers):
            if latest_only:
                if not subscriber.offer_frame(text):
                    self.frames_dropped += 1
            else:
                subscriber.offer_event(text)

    async def broadcast_event(self, event_type: str, data: dict):
        await self.broadcast(make_message(event_type, data), latest_only=event_type == DRIVER_UPDATE)

    async def send_personal(self, websocket: WebSocket, message: dict):
        """특정 연결 하나에만 전송 (송신 태스크를 거친다)"""
        subscriber = self._find(websocket)
        if subscriber is not None:
            subscriber.offer_event(json.dumps(message, ensure_ascii=False, default=str))

    async def shutdown(self):
        """앱 종료 시 모든 송신 태스크 정리"""
        tasks = [s.task for s in self._subscribers if s.task is not None]
        self._subscribers.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


def make_message(event_type: str, data: dict) -> dict:
    return {
        "type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


@router.websocket("/ws/realtime")
async def websocket_endpoint(websocket: WebSocket):
    """실시간 WebSocket 엔드포인트"""
    manager: ConnectionManager = websocket.app.state.ws_manager
    broadcast_loop = websocket.app.state.broadcast_loop

    await manager.connect(websocket)
    try:
        # 다음 틱을 기다리지 않고 마지막 스냅샷을 바로 보낸다
        snapshot = broadcast_loop.latest_snapshot
        if snapshot is not None:
            await manager.send_personal(websocket, make_message(DRIVER_UPDATE, snapshot.to_geojson()))

        # 클라이언트 메시지 수신 루프 (핑/퐁 유지)
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await manager.send_personal(websocket, {"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)
