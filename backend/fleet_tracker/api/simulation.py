"""
시뮬레이션 API — 상태 조회, 시작/중지, 리셋
"""

import logging

from fastapi import APIRouter, Request

from fleet_tracker.schemas.simulation import SimulationStatus, SimulationControlResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


def _status(request: Request) -> SimulationStatus:
    loop = request.app.state.broadcast_loop
    engine = request.app.state.engine
    return SimulationStatus(
        is_running=loop.is_running,
        interval_ms=round(loop.interval_seconds * 1000),
        tick_count=engine.tick_count,
        fleet_size=engine.fleet_size,
        next_order_number=engine.next_order_number,
        ticks_published=loop.ticks_published,
        frames_dropped=request.app.state.ws_manager.frames_dropped,
        ticks_skipped=loop.ticks_skipped,
    )


@router.get("/status", response_model=SimulationStatus)
def get_status(request: Request):
    return _status(request)


@router.post("/start", response_model=SimulationControlResponse)
async def start_simulation(request: Request):
    await request.app.state.broadcast_loop.start()
    return SimulationControlResponse(message="시뮬레이션 시작", status=_status(request))


@router.post("/stop", response_model=SimulationControlResponse)
async def stop_simulation(request: Request):
    await request.app.state.broadcast_loop.stop()
    return SimulationControlResponse(message="시뮬레이션 중지", status=_status(request))


@router.post("/reset", response_model=SimulationControlResponse)
async def reset_simulation(request: Request):
    """전체 차량을 허브 대기 상태로, 주문 번호를 시작값으로 리셋한다 (프로세스 재시작과 동일)."""
    loop = request.app.state.broadcast_loop
    was_running = loop.is_running

    await loop.stop()
    request.app.state.engine.reset()
    loop.clear_snapshot()
    if was_running:
        await loop.start()

    logger.info("[Reset] 시뮬레이션 초기화 완료")
    return SimulationControlResponse(message="시뮬레이션이 초기 상태로 리셋되었습니다", status=_status(request))
