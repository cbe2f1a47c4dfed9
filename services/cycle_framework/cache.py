"""
Plan Cache Service

Optional, caller-owned cache for derived plans.
The engines never read from it; callers decide when to use it.

Layers:
1. Fitness plans (per profile + input fingerprint, 1-hour TTL)
2. Race plans (per profile + input fingerprint, 1-day TTL)

Usage:
    cache = PlanCacheService(redis)

    key = cache.fingerprint(profile=profile_dict, preferences=prefs_dict, start="2024-03-04")
    plan = cache.get_fitness_plan(profile_id, key)
    if plan is None:
        plan = [e.to_dict() for e in generator.generate(...)]
        cache.set_fitness_plan(profile_id, key, plan)

    # New period or completion data logged
    cache.invalidate_profile(profile_id)
"""

import json
import hashlib
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)


class PlanCacheService:
    """
    Two-layer caching for generated plans.
    """

    # Cache TTLs in seconds
    TTL_FITNESS_PLAN = 3600              # 1 hour
    TTL_RACE_PLAN = 86400                # 1 day

    def __init__(
        self,
        redis=None,
        ttl_fitness_plan: Optional[int] = None,
        ttl_race_plan: Optional[int] = None,
    ):
        """
        Initialize cache service.

        Args:
            redis: Redis client (optional, uses in-memory if not provided)
        """
        self.redis = redis
        self.ttl_fitness_plan = ttl_fitness_plan or self.TTL_FITNESS_PLAN
        self.ttl_race_plan = ttl_race_plan or self.TTL_RACE_PLAN
        self._local_cache: Dict[str, Any] = {}
        self._local_expiry: Dict[str, Optional[datetime]] = {}

    @classmethod
    def from_settings(cls, settings, redis=None) -> "PlanCacheService":
        return cls(
            redis=redis,
            ttl_fitness_plan=settings.CACHE_TTL_FITNESS_PLAN,
            ttl_race_plan=settings.CACHE_TTL_RACE_PLAN,
        )

    @staticmethod
    def fingerprint(**inputs: Any) -> str:
        """Stable hash of the generation inputs."""
        payload = json.dumps(inputs, sort_keys=True, default=str)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    # ========== Fitness Plans (Layer 1) ==========

    def get_fitness_plan(self, profile_id: str, fingerprint: str) -> Optional[list]:
        key = f"plan:profile:{profile_id}:fitness:{fingerprint}"
        return self._get(key)

    def set_fitness_plan(self, profile_id: str, fingerprint: str, entries: list):
        """Cache a serialised fitness plan."""
        key = f"plan:profile:{profile_id}:fitness:{fingerprint}"
        self._set(key, entries, self.ttl_fitness_plan)

    # ========== Race Plans (Layer 2) ==========

    def get_race_plan(self, profile_id: str, fingerprint: str) -> Optional[dict]:
        key = f"plan:profile:{profile_id}:race:{fingerprint}"
        return self._get(key)

    def set_race_plan(self, profile_id: str, fingerprint: str, plan: dict):
        """Cache a serialised race plan."""
        key = f"plan:profile:{profile_id}:race:{fingerprint}"
        self._set(key, plan, self.ttl_race_plan)

    # ========== Invalidation ==========

    def invalidate_profile(self, profile_id: str):
        """Drop every cached plan for a profile."""
        prefix = f"plan:profile:{profile_id}:"
        if self.redis:
            try:
                cursor = 0
                while True:
                    cursor, keys = self.redis.scan(cursor, match=f"{prefix}*", count=100)
                    if keys:
                        self.redis.delete(*keys)
                    if cursor == 0:
                        break
            except Exception as e:
                logger.warning(f"Cache invalidate error for {profile_id}: {e}")
        else:
            for key in [k for k in self._local_cache if k.startswith(prefix)]:
                self._delete(key)

        logger.info(f"Plan caches invalidated for profile {profile_id}")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        if self.redis:
            info = self.redis.info()
            return {
                "type": "redis",
                "connected": True,
                "used_memory": info.get("used_memory_human", "unknown"),
                "keys": self.redis.dbsize(),
            }
        else:
            return {
                "type": "local",
                "keys": len(self._local_cache),
            }

    # ========== Internal Methods ==========

    def _get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if self.redis:
            try:
                value = self.redis.get(key)
                if value:
                    return json.loads(value)
            except Exception as e:
                logger.warning(f"Cache get error for {key}: {e}")
        else:
            # Check local cache with expiry
            if key in self._local_cache:
                expiry = self._local_expiry.get(key)
                if expiry is None or expiry > datetime.now(timezone.utc):
                    return self._local_cache[key]
                else:
                    # Expired
                    self._delete(key)

        return None

    def _set(self, key: str, value: Any, ttl: Optional[int]):
        """Set value in cache."""
        if self.redis:
            try:
                serialized = json.dumps(value, default=str)
                if ttl:
                    self.redis.setex(key, ttl, serialized)
                else:
                    self.redis.set(key, serialized)
            except Exception as e:
                logger.warning(f"Cache set error for {key}: {e}")
        else:
            self._local_cache[key] = value
            if ttl:
                self._local_expiry[key] = datetime.now(timezone.utc) + timedelta(seconds=ttl)
            else:
                self._local_expiry[key] = None

    def _delete(self, key: str):
        """Delete value from cache."""
        if self.redis:
            try:
                self.redis.delete(key)
            except Exception as e:
                logger.warning(f"Cache delete error for {key}: {e}")
        else:
            self._local_cache.pop(key, None)
            self._local_expiry.pop(key, None)
