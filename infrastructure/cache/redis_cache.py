import json
import logging
import time
from datetime import datetime, timedelta
from decimal import Decimal

from redis import asyncio as redis
from redis.exceptions import ResponseError

from domain.exceptions.currency import InvalidInputError
from domain.models.currency import Rate

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "exchange_rate"


class RateCache:
    """Best-effort Redis cache holding the best rate per pair.

    Redis faults never reach callers: reads degrade to a miss and writes are
    dropped after logging.
    """

    def __init__(self, redis_client: redis.Redis, rate_ttl: timedelta = timedelta(hours=1)):
        self.redis = redis_client
        self.rate_ttl = rate_ttl

    @staticmethod
    def make_key(base: str, target: str) -> str:
        return f"{CACHE_KEY_PREFIX}:{(base or '').strip().upper()}:{(target or '').strip().upper()}"

    async def get(self, base: str, target: str) -> Rate | None:
        key = self.make_key(base, target)
        start_time = time.time()
        try:
            data = await self.redis.get(key)
        except ResponseError as e:
            # WRONGTYPE: the key holds something other than a string
            logger.warning(f"Evicting unreadable cache entry {key}: {e}")
            await self._delete(key)
            return None
        except Exception as e:
            logger.error(f"Cache get failed for {key}: {e}")
            return None

        duration_ms = (time.time() - start_time) * 1000
        if not data:
            logger.debug(f"Cache MISS for {key} ({duration_ms:.2f}ms)")
            return None

        rate = self._decode(data)
        if rate is None or rate.pair != self._pair_of(key):
            logger.warning(f"Evicting unreadable cache entry {key}")
            await self._delete(key)
            return None

        logger.debug(f"Cache HIT for {key} ({duration_ms:.2f}ms)")
        return rate

    async def set(self, base: str, target: str, rate: Rate, ttl: timedelta | None = None) -> bool:
        key = self.make_key(base, target)
        pair = self._pair_of(key)
        if pair[0] == pair[1]:
            logger.warning(f"Refusing to cache same-currency pair {key}")
            return False
        if rate.pair != pair:
            logger.warning(f"Refusing to cache {rate.base}->{rate.target} rate under {key}")
            return False

        try:
            await self.redis.setex(key, ttl or self.rate_ttl, self._encode(rate))
        except Exception as e:
            logger.error(f"Cache set failed for {key}: {e}")
            return False

        logger.debug(f"Cached {key} = {rate.value} from {rate.provider_name}")
        return True

    async def invalidate(self, base: str, target: str) -> None:
        await self._delete(self.make_key(base, target))

    async def invalidate_all(self) -> int:
        deleted = 0
        try:
            batch = []
            async for key in self.redis.scan_iter(match=f"{CACHE_KEY_PREFIX}:*", count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += await self.redis.delete(*batch)
                    batch = []
            if batch:
                deleted += await self.redis.delete(*batch)
        except Exception as e:
            logger.error(f"Failed to invalidate cached rates: {e}")
            return deleted

        logger.info(f"Invalidated {deleted} cached exchange rates")
        return deleted

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error(f"Cache ping failed: {e}")
            return False

    async def _delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except Exception as e:
            logger.error(f"Cache delete failed for {key}: {e}")

    @staticmethod
    def _pair_of(key: str) -> tuple[str, str]:
        _, base, target = key.split(":", 2)
        return base, target

    @staticmethod
    def _encode(rate: Rate) -> str:
        return json.dumps({
            "base": rate.base,
            "target": rate.target,
            "value": str(rate.value),
            "provider_name": rate.provider_name,
            "observed_at": rate.observed_at.isoformat(),
        })

    @staticmethod
    def _decode(data: str | bytes) -> Rate | None:
        try:
            payload = json.loads(data)
            return Rate(
                base=payload["base"],
                target=payload["target"],
                value=Decimal(payload["value"]),
                provider_name=payload["provider_name"],
                observed_at=datetime.fromisoformat(payload["observed_at"]),
            )
        except (ValueError, KeyError, TypeError, ArithmeticError, InvalidInputError):
            return None
