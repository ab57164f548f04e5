"""
비동기 이벤트 버스 — 주문 생애주기 이벤트 pub/sub
- Redis Streams 사용 시도, 실패하거나 URL이 비어 있으면 인메모리 asyncio.Queue로 fallback
- 토픽: orders.assigned / orders.picked_up / orders.delivered
"""

import asyncio
import json
import logging
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# 핸들러 타입: async callable(topic, data)
Handler = Callable[[str, dict], Coroutine[Any, Any, None]]

QUEUE_MAXSIZE = 10000
STREAM_MAXLEN = 1000


class AsyncEventBus:
    """
    사용법:
        bus = AsyncEventBus(redis_url="redis://localhost:6379")
        await bus.subscribe("orders.assigned", handler)
        await bus.start()
        await bus.publish("orders.assigned", {"order_id": "O1005"})
    """

    def __init__(self, redis_url: str = "", max_recent: int = 500):
        self._redis_url = redis_url
        self._redis = None
        self._use_redis = False

        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._queues: dict[str, asyncio.Queue] = {}
        self._recent_events: dict[str, deque] = defaultdict(lambda: deque(maxlen=max_recent))

        self._running = False
        self._consumer_tasks: list[asyncio.Task] = []

    @property
    def is_redis(self) -> bool:
        return self._use_redis

    @property
    def is_running(self) -> bool:
        return self._running

    async def _try_connect_redis(self):
        if not self._redis_url:
            logger.info("AsyncEventBus: Redis URL 미설정 — 인메모리 모드")
            return
        try:
            import redis.asyncio as aioredis
            self._redis = aioredis.from_url(self._redis_url, decode_responses=True)
            await self._redis.ping()
            self._use_redis = True
            logger.info("AsyncEventBus: Redis 연결 성공")
        except Exception as e:
            logger.warning(f"AsyncEventBus: Redis 연결 실패 ({e}) — 인메모리 모드")
            if self._redis is not None:
                await self._redis.aclose()
            self._redis = None
            self._use_redis = False

    def _queue_for(self, topic: str) -> asyncio.Queue:
        if topic not in self._queues:
            self._queues[topic] = asyncio.Queue(maxsize=QUEUE_MAXSIZE)
        return self._queues[topic]

    async def subscribe(self, topic: str, handler: Handler):
        """토픽에 핸들러를 등록한다. start() 전에 호출해야 소비자 루프가 생긴다."""
        if handler in self._handlers[topic]:
            return
        self._handlers[topic].append(handler)
        self._queue_for(topic)
        logger.debug(f"구독 등록: {topic} → {handler.__qualname__}")

    async def publish(self, topic: str, data: dict):
        event = {
            "topic": topic,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._recent_events[topic].append(event)

        if self._use_redis and self._redis:
            try:
                fields = {k: json.dumps(v) for k, v in data.items()}
                fields["_timestamp"] = event["timestamp"]
                await self._redis.xadd(topic, fields, maxlen=STREAM_MAXLEN)
                return
            except Exception as e:
                logger.error(f"Redis publish 실패 ({topic}): {e} — 인메모리 큐 사용")
        self._enqueue_inmemory(topic, event)

    def _enqueue_inmemory(self, topic: str, event: dict):
        queue = self._queue_for(topic)
        if queue.full():
            # 가장 오래된 이벤트를 버린다
            queue.get_nowait()
        queue.put_nowait(event)

    async def _inmemory_consumer(self, topic: str):
        queue = self._queue_for(topic)
        while self._running:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break
            await self._dispatch(topic, event["data"])

    async def _redis_consumer(self, topic: str):
        last_id = "$"  # 새 메시지만
        while self._running:
            try:
                results = await self._redis.xread({topic: last_id}, count=10, block=1000)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Redis 소비자 에러 ({topic}): {e}")
                await asyncio.sleep(1.0)
                continue

            for _stream, messages in results:
                for msg_id, fields in messages:
                    last_id = msg_id
                    data = {}
                    for k, v in fields.items():
                        if k == "_timestamp":
                            continue
                        try:
                            data[k] = json.loads(v)
                        except (json.JSONDecodeError, TypeError):
                            data[k] = v
                    await self._dispatch(topic, data)

    async def _dispatch(self, topic: str, data: dict):
        for handler in self._handlers.get(topic, []):
            try:
                await handler(topic, data)
            except Exception as e:
                logger.error(f"핸들러 에러 ({topic}, {handler.__qualname__}): {e}")

    async def start(self):
        """Redis 연결을 시도하고 구독된 토픽마다 소비자 태스크를 만든다."""
        if self._running:
            return
        await self._try_connect_redis()
        self._running = True

        for topic in self._handlers:
            if self._use_redis:
                coro = self._redis_consumer(topic)
                name = f"redis-consumer-{topic}"
            else:
                coro = self._inmemory_consumer(topic)
                name = f"inmemory-consumer-{topic}"
            self._consumer_tasks.append(asyncio.create_task(coro, name=name))

        logger.info(
            f"AsyncEventBus 시작: {len(self._consumer_tasks)}개 소비자 "
            f"({'Redis' if self._use_redis else '인메모리'})"
        )

    async def stop(self):
        self._running = False
        for task in self._consumer_tasks:
            task.cancel()
        if self._consumer_tasks:
            await asyncio.gather(*self._consumer_tasks, return_exceptions=True)
        self._consumer_tasks = []

        if self._redis:
            await self._redis.aclose()
            self._redis = None
            self._use_redis = False

        logger.info("AsyncEventBus 중지 완료")

    def get_recent(self, topic: str | None = None, count: int = 10) -> list[dict]:
        """최근 이벤트 조회. topic이 없으면 전체 토픽을 시간순으로 합친다."""
        if topic:
            return list(self._recent_events.get(topic, ()))[-count:]
        merged = [e for events in self._recent_events.values() for e in events]
        merged.sort(key=lambda e: e["timestamp"])
        return merged[-count:]
