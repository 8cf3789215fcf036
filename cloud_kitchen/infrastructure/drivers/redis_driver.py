import asyncio
import json
from typing import Dict, Optional

import redis

from cloud_kitchen.interfaces.IDocumentDriver import IDocumentDriver

KITCHEN_STATUS_KEY = "kitchen:status"


def create_redis_client(redis_url: str):
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=1  # Fail fast so the file store takes over
    )


class RedisDocumentDriver(IDocumentDriver):
    """A JSON document under one redis key. Used for the kitchen open/closed flag."""

    name = "redis"

    def __init__(self, client, key: str = KITCHEN_STATUS_KEY):
        self.redis = client
        self.key = key

    async def load(self) -> Optional[Dict]:
        raw = await asyncio.to_thread(self.redis.get, self.key)
        return json.loads(raw) if raw else None

    async def save(self, document: Dict) -> None:
        await asyncio.to_thread(self.redis.set, self.key, json.dumps(document))
