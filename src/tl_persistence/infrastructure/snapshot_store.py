"""SnapshotStore — best-effort save/restore of engine state in redis.

Never raises to the caller: a missing, unparseable, incomplete, stale (older
than max_age_s) or future-dated record is treated as "no saved state", and
redis failures are logged and swallowed so the engine can always start fresh.
"""
import logging
from datetime import datetime

from pydantic import ValidationError
from redis.exceptions import RedisError

from src.tl_common.datetime_utils import age_seconds, utc_now
from src.tl_engine.domain.models import EngineState
from src.tl_persistence.application.schemas import PersistedState
from src.tl_persistence.domain.repository import KeyValueStore

logger = logging.getLogger(__name__)

# Tolerated clock difference for records that look slightly newer than now.
MAX_CLOCK_SKEW_S = 5


class SnapshotStore:
    def __init__(self, client: KeyValueStore, key: str, max_age_s: int = 3600) -> None:
        self._client = client
        self._key = key
        self._max_age_s = max_age_s

    async def save(self, state: EngineState, now: datetime | None = None) -> bool:
        record = PersistedState.from_domain(state, saved_at=now or utc_now())
        try:
            await self._client.set(self._key, record.model_dump_json(), ex=self._max_age_s)
        except (RedisError, OSError) as exc:
            logger.warning("Snapshot save failed for %s: %s", self._key, exc)
            return False
        logger.debug(
            "Snapshot saved: %d armed, %d trades", len(record.armed), len(record.trades)
        )
        return True

    async def load(self, now: datetime | None = None) -> EngineState | None:
        try:
            raw = await self._client.get(self._key)
        except (RedisError, OSError) as exc:
            logger.warning("Snapshot load failed for %s: %s", self._key, exc)
            return None
        if raw is None:
            return None

        try:
            record = PersistedState.model_validate_json(raw)
            state = record.to_domain()
            state.settings.ladder_config()
        except (ValidationError, ValueError) as exc:
            logger.warning("Discarding malformed snapshot %s: %s", self._key, exc)
            return None

        age = age_seconds(record.saved_at, now)
        if age > self._max_age_s:
            logger.warning("Discarding stale snapshot %s (%.0fs old)", self._key, age)
            return None
        if age < -MAX_CLOCK_SKEW_S:
            logger.warning(
                "Discarding future-dated snapshot %s (%.0fs ahead)", self._key, -age
            )
            return None
        return state

    async def clear(self) -> None:
        try:
            await self._client.delete(self._key)
        except (RedisError, OSError) as exc:
            logger.warning("Snapshot clear failed for %s: %s", self._key, exc)
