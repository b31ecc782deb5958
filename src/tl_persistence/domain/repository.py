"""KeyValueStore Protocol — the subset of the redis.asyncio client the snapshot store uses."""
from typing import Any, Protocol


class KeyValueStore(Protocol):
    async def get(self, name: str) -> Any: ...

    async def set(self, name: str, value: str, ex: int | None = None) -> Any: ...

    async def delete(self, *names: str) -> Any: ...
