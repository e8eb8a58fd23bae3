from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class Cache(ABC):
    """Cache interface so the response cache, sweeper and admin routes work against any backend (memory, none)."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def has(self, key: str) -> bool:
        ...

    @abstractmethod
    def size(self) -> int:
        ...

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def cleanup(self) -> int:
        ...

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.has(key)
