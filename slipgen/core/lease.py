import logging
import threading
import time
import uuid
from typing import Dict, Tuple

import redis

from slipgen.core.config import Settings, get_settings
from slipgen.core.timing import Clock

logger = logging.getLogger(__name__)

# Delete the key only if it still holds our token, so an expired-then-reacquired
# lease is never released by its previous owner.
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


class RunLease:
    """Exclusive, expiring claim on a slip id.

    Backed by Redis when a client is given; otherwise an in-process table with
    the same semantics, which only holds within a single process (tests, the
    ``memory`` backend).
    """

    key_prefix = "slipgen:lease:"

    def __init__(
        self,
        *,
        ttl_seconds: int,
        redis_client: redis.Redis | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._redis = redis_client
        self._clock = clock
        self._memory: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _key(self, slip_id: str) -> str:
        return f"{self.key_prefix}{slip_id}"

    def acquire(self, slip_id: str) -> str | None:
        token = uuid.uuid4().hex
        if self._redis is not None:
            ok = self._redis.set(self._key(slip_id), token, nx=True, px=self.ttl_seconds * 1000)
            return token if ok else None

        with self._lock:
            now = self._clock()
            held = self._memory.get(slip_id)
            if held and held[1] > now:
                return None
            self._memory[slip_id] = (token, now + self.ttl_seconds)
            return token

    def release(self, slip_id: str, token: str) -> bool:
        if self._redis is not None:
            return bool(self._redis.eval(_RELEASE_SCRIPT, 1, self._key(slip_id), token))

        with self._lock:
            held = self._memory.get(slip_id)
            if not held or held[0] != token:
                return False
            del self._memory[slip_id]
            return True

    def is_held(self, slip_id: str) -> bool:
        if self._redis is not None:
            return bool(self._redis.exists(self._key(slip_id)))

        with self._lock:
            held = self._memory.get(slip_id)
            return bool(held and held[1] > self._clock())


def build_run_lease(settings: Settings | None = None) -> RunLease:
    """Build the lease for ``settings.lease_backend``.

    ``memory`` only excludes runs inside one process. Any other backend needs a
    reachable Redis; a failed connection is raised rather than downgraded.
    """
    settings = settings or get_settings()
    if settings.lease_backend == "memory":
        return RunLease(ttl_seconds=settings.lease_ttl_seconds)

    client = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        client.ping()
    except redis.RedisError as exc:
        logger.error(
            "Run lease backend unreachable",
            extra={"extra": {"backend": settings.lease_backend, "error": str(exc)}},
        )
        raise
    return RunLease(ttl_seconds=settings.lease_ttl_seconds, redis_client=client)


_default_lease: RunLease | None = None


def get_run_lease() -> RunLease:
    global _default_lease
    if _default_lease is None:
        _default_lease = build_run_lease()
    return _default_lease
