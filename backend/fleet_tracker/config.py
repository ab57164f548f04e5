"""
애플리케이션 설정
- 시뮬레이션 주기, 배차 확률, 경로 해상도, Redis, 서버 설정을 관리한다.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 시뮬레이션 틱 간격 (밀리초) — 기본 100ms = 10Hz
    SIMULATION_INTERVAL_MS: int = Field(default=100, gt=0)

    # 대기 차량이 한 틱에 새 주문을 배정받을 확률
    ASSIGNMENT_PROBABILITY: float = Field(default=0.05, ge=0.0, le=1.0)

    # 한 구간(leg) 경로의 분할 수 — steps+1 개의 좌표가 생성된다
    ROUTE_STEPS: int = Field(default=100, ge=1)

    # 경로 곡률 (직선 대비 제어점 이동 비율)
    ROUTE_CURVATURE: float = 0.3

    # 주문 번호 시작값
    ORDER_ID_START: int = Field(default=1005, ge=0)

    # 난수 시드 (None이면 비결정적)
    RANDOM_SEED: int | None = None

    # 앱 시작 시 시뮬레이션 자동 시작 여부
    SIMULATION_AUTOSTART: bool = True

    # WebSocket 구독자 한 명에게 보내는 최대 대기 시간 (초)
    WS_SEND_TIMEOUT_SECONDS: float = Field(default=1.0, gt=0)

    # Redis (빈 문자열이거나 연결 실패 시 인메모리 큐로 fallback)
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # 서버
    HOST: str = "0.0.0.0"
    PORT: int = 3030
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def interval_seconds(self) -> float:
        return self.SIMULATION_INTERVAL_MS / 1000.0


settings = Settings()
