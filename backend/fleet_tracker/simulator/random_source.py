"""
난수 소스 — 배차 확률 추첨과 목적지 선택에 사용.
테스트에서는 시드 고정 또는 스크립트된 소스로 교체한다.
"""

import random
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def uniform(self) -> float:
        """[0, 1) 균등 분포 값"""
        ...

    def choose(self, items: Sequence[T]) -> T:
        """items 중 하나를 균등 확률로 선택"""
        ...


class SeededRandomSource:
    """random.Random 기반 구현. seed=None이면 시스템 엔트로피를 사용한다."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)

    def uniform(self) -> float:
        return self._random.random()

    def choose(self, items: Sequence[T]) -> T:
        return self._random.choice(items)
