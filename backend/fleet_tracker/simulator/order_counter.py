"""
주문 번호 카운터 — 엔진 인스턴스마다 하나씩 소유한다.
"""


class OrderCounter:
    """단조 증가 주문 번호. 코드 형식: O<번호> (예: O1005)"""

    def __init__(self, start: int = 1005):
        self._start = start
        self._next = start

    @property
    def next_number(self) -> int:
        return self._next

    def allocate(self) -> str:
        """다음 주문 코드를 발급하고 카운터를 증가시킨다."""
        number = self._next
        self._next += 1
        return f"O{number}"

    def reset(self):
        """시작값으로 되돌린다 (시뮬레이션 리셋 시)"""
        self._next = self._start
