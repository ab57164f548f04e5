"""
공통 예외
"""


class ConfigurationError(ValueError):
    """시작 시점 설정 오류 — 엔진이 정의되지 않은 상태로 실행되는 것을 막는다."""
