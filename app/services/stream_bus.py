# app/services/stream_bus.py
import json
import logging
from typing import Any, Dict, Optional

from redis import asyncio as aioredis
from app.config import REDIS_URL, NOTIFICATION_CHANNEL_PREFIX

logger = logging.getLogger(__name__)


def user_channel(user_id: str, prefix: str = NOTIFICATION_CHANNEL_PREFIX) -> str:
    return f"{prefix}:{user_id}"


class RedisBus:
    """
    Redis Pub/Sub fan-out across multiple workers.

    Fan-out policy: one channel per user. Every open stream of that user holds its
    own subscriber, so a message reaches all of the user's connections on any worker
    and nobody else's.
    """

    def __init__(self, url: str = REDIS_URL, prefix: str = NOTIFICATION_CHANNEL_PREFIX):
        self._url = url
        self._prefix = prefix
        self._pub = aioredis.Redis.from_url(self._url, decode_responses=True)

    async def publish(self, user_id: str, payload: Dict[str, Any]) -> None:
        data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        await self._pub.publish(user_channel(user_id, self._prefix), data)

    async def open_subscriber(self, user_id: str):
        """Create and subscribe a dedicated PubSub connection for one user's channel."""
        pubsub = self._pub.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(user_channel(user_id, self._prefix))
        return pubsub

    async def close_subscriber(self, pubsub) -> None:
        try:
            await pubsub.unsubscribe()
        except Exception:
            logger.debug("redis_bus: unsubscribe failed", exc_info=True)
        try:
            await pubsub.aclose()
        except Exception:
            logger.debug("redis_bus: close failed", exc_info=True)


# Singleton accessor
_bus: Optional[RedisBus] = None

def get_stream_bus() -> RedisBus:
    global _bus
    if _bus is None:
        _bus = RedisBus()
    return _bus


async def publish_to_user(user_id: str, payload: Dict[str, Any]) -> None:
    """Best-effort publish: the notification row is already committed, so failures are only logged."""
    try:
        await get_stream_bus().publish(user_id, payload)
        logger.debug("published to %s: %s", user_channel(user_id), payload.get("type"))
    except Exception as ex:
        logger.exception("Failed to publish notification to stream: %s", ex)
