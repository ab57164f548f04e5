"""
FastAPI 앱 엔트리포인트
- CORS 설정
- 라우터 등록 (WebSocket, 차량 조회, 시뮬레이션 제어)
- AsyncEventBus + DispatchEngine + BroadcastLoop 백그라운드 시작
- 헬스체크 엔드포인트
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from fleet_tracker.config import Settings, settings as default_settings
from fleet_tracker.api import fleet, simulation
from fleet_tracker.api.websocket import router as ws_router, ConnectionManager, ORDER_UPDATE
from fleet_tracker.events.event_bus import AsyncEventBus
from fleet_tracker.events.topics import TOPICS
from fleet_tracker.models.location import GeoCatalog
from fleet_tracker.schemas.common import HealthResponse
from fleet_tracker.seed_data import DEFAULT_DRIVERS, default_catalog
from fleet_tracker.simulator.broadcast_loop import BroadcastLoop
from fleet_tracker.simulator.dispatch_engine import DispatchEngine, DriverProfile

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(settings: Settings | None = None,
               catalog: GeoCatalog | None = None,
               drivers: list[DriverProfile] | None = None) -> FastAPI:
    """
    앱 생성. 카탈로그/드라이버를 주입하지 않으면 기본 테헤란 데이터를 사용한다.
    설정 오류(ConfigurationError)는 여기서 바로 발생한다 — 잘못된 설정으로 기동하지 않는다.
    """
    settings = settings or default_settings
    catalog = catalog if catalog is not None else default_catalog()
    drivers = drivers if drivers is not None else DEFAULT_DRIVERS

    engine = DispatchEngine.from_settings(settings, catalog, drivers)
    ws_manager = ConnectionManager(send_timeout=settings.WS_SEND_TIMEOUT_SECONDS)
    event_bus = AsyncEventBus(settings.REDIS_URL)
    broadcast_loop = BroadcastLoop(
        engine, ws_manager,
        interval_seconds=settings.interval_seconds,
        event_bus=event_bus,
    )

    async def forward_order_event(topic: str, data: dict):
        """주문 이벤트를 WebSocket 구독자에게 전달"""
        await ws_manager.broadcast_event(ORDER_UPDATE, {"topic": topic, **data})

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """앱 시작/종료 시 백그라운드 컴포넌트 관리"""
        # ── 1. 이벤트 버스 구독 등록 후 시작 ──
        for topic in TOPICS:
            await event_bus.subscribe(topic, forward_order_event)
        await event_bus.start()
        logger.info("AsyncEventBus 시작 완료")

        # ── 2. 시뮬레이션 시작 ──
        if settings.SIMULATION_AUTOSTART:
            await broadcast_loop.start()
            logger.info("시뮬레이션 백그라운드 태스크 시작")

        yield

        # ── 종료 ──
        await broadcast_loop.stop()
        logger.info("시뮬레이션 중지 완료")
        await ws_manager.shutdown()
        await event_bus.stop()

    app = FastAPI(
        title="Fleet Tracker",
        description="배송 차량 실시간 위치 시뮬레이션 및 브로드캐스트",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.ws_manager = ws_manager
    app.state.event_bus = event_bus
    app.state.broadcast_loop = broadcast_loop

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(fleet.router)
    app.include_router(simulation.router)
    app.include_router(ws_router)
    app.add_api_route("/api/health", health_check, methods=["GET"], response_model=HealthResponse)

    return app


def health_check(request: Request):
    """시스템 상태 확인"""
    state = request.app.state
    return HealthResponse(
        status="ok",
        redis_connected=state.event_bus.is_redis,
        simulation_running=state.broadcast_loop.is_running,
        tick_count=state.engine.tick_count,
        subscribers=len(state.ws_manager.active_connections),
        timestamp=datetime.now(timezone.utc),
    )


def run():
    """uvicorn으로 서버 실행 (fleet-tracker 콘솔 스크립트)"""
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


configure_logging(default_settings.LOG_LEVEL)
app = create_app()
