import pytest
import redis

from slipgen.core import lease as lease_module
from slipgen.core.config import Settings
from slipgen.core.errors import DeadlineExceeded
from slipgen.core.lease import RunLease, build_run_lease
from slipgen.core.timing import Deadline, VirtualClock


def test_deadline_clips_timeouts_to_remaining_budget():
    clock = VirtualClock()
    deadline = Deadline(10, clock=clock)

    assert deadline.clip(5000) == 5000
    clock.advance(8)
    assert deadline.remaining_ms() == 2000
    assert deadline.clip(5000) == 2000


def test_deadline_check_names_the_phase():
    clock = VirtualClock()
    deadline = Deadline(120, clock=clock)
    clock.advance(120)

    assert deadline.expired
    with pytest.raises(DeadlineExceeded) as exc_info:
        deadline.clip(1000, "submitting")
    assert str(exc_info.value) == "Run timed out after 120s during submitting"


def test_lease_is_exclusive_until_released():
    lease = RunLease(ttl_seconds=180, clock=VirtualClock())

    token = lease.acquire("slip-1")

    assert token
    assert lease.acquire("slip-1") is None
    assert lease.acquire("slip-2")
    assert lease.release("slip-1", token) is True
    assert lease.acquire("slip-1")


def test_release_with_stale_token_keeps_new_holder():
    clock = VirtualClock()
    lease = RunLease(ttl_seconds=180, clock=clock)
    old = lease.acquire("slip-1")
    clock.advance(181)
    new = lease.acquire("slip-1")

    assert new
    assert lease.release("slip-1", old) is False
    assert lease.is_held("slip-1")


class FakeRedis:
    def __init__(self):
        self.data = {}

    def ping(self):
        return True

    def set(self, key, value, nx=False, px=None):
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    def eval(self, script, numkeys, key, token):
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0

    def exists(self, key):
        return int(key in self.data)


def test_redis_backed_lease_uses_prefixed_keys():
    client = FakeRedis()
    lease = RunLease(ttl_seconds=180, redis_client=client)

    token = lease.acquire("slip-1")

    assert client.data == {"slipgen:lease:slip-1": token}
    assert lease.acquire("slip-1") is None
    assert lease.release("slip-1", "someone-else") is False
    assert lease.release("slip-1", token) is True
    assert not lease.is_held("slip-1")


def test_memory_backend_never_touches_redis(monkeypatch):
    def no_redis(*args, **kwargs):
        raise AssertionError("redis should not be used")

    monkeypatch.setattr(lease_module.redis, "from_url", no_redis)

    lease = build_run_lease(Settings(lease_backend="memory"))

    assert lease.acquire("slip-1")
    assert lease.acquire("slip-1") is None


def test_redis_backend_uses_the_shared_client(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr(lease_module.redis, "from_url", lambda url, **kwargs: client)

    lease = build_run_lease(Settings(lease_backend="redis"))
    lease.acquire("slip-1")

    assert "slipgen:lease:slip-1" in client.data


def test_unreachable_redis_is_an_error_not_a_local_lease(monkeypatch):
    class DownRedis(FakeRedis):
        def ping(self):
            raise redis.ConnectionError("Connection refused")

    monkeypatch.setattr(lease_module.redis, "from_url", lambda url, **kwargs: DownRedis())

    with pytest.raises(redis.ConnectionError):
        build_run_lease(Settings(lease_backend="redis"))
