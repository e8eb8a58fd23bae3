# app/schemas/cache.py

from pydantic import BaseModel


class CacheStats(BaseModel):
    hits: int
    misses: int
    sets: int
    deletes: int
    hitRate: str
    size: int
    memoryUsage: str
