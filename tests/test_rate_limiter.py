import pytest
import redis
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from venuebook import rate_limiter


class FakeRedis:
    def __init__(self, count=None, ttl=-2, fail=False):
        self.values = {} if count is None else {"seeded": str(count)}
        self._ttl = ttl
        self.fail = fail
        self.writes = []

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("down")
        return self.values.get(key)

    def ttl(self, key):
        return self._ttl

    def set(self, key, value, ex=None):
        self.writes.append((key, value, ex))
        self.values[key] = str(value)


@pytest.fixture(autouse=True)
def clear_memory_cache():
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


def test_allows_up_to_limit():
    fake = FakeRedis()

    results = [rate_limiter.check_rate_limit("k", 3, 60, fake) for _ in range(4)]

    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert [count for _, count, _ in results] == [1, 2, 3, 3]
    assert 0 < results[-1][2] <= 60


def test_count_seeded_from_redis():
    fake = FakeRedis(count=5, ttl=30)

    allowed, count, ttl = rate_limiter.check_rate_limit("seeded", 5, 60, fake)

    assert allowed is False
    assert count == 5
    assert ttl <= 30


def test_redis_errors_fall_back_to_memory():
    allowed, count, _ = rate_limiter.check_rate_limit("k", 2, 60, FakeRedis(fail=True))

    assert allowed is True
    assert count == 1


def make_app():
    app = FastAPI()
    limit = rate_limiter.create_rate_limiter(limit=2, window_seconds=60, key_prefix="test")

    @app.get("/limited")
    async def limited(_: None = Depends(limit)):
        return {"ok": True}

    return TestClient(app)


def test_dependency_returns_429(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: FakeRedis())
    client = make_app()

    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 200
    blocked = client.get("/limited")
    assert blocked.status_code == 429
    assert blocked.json()["detail"]["limit"] == 2
    assert "Retry-After" in blocked.headers


def test_dependency_keys_by_forwarded_ip(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: FakeRedis())
    client = make_app()

    for _ in range(2):
        client.get("/limited", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

    assert client.get("/limited", headers={"X-Forwarded-For": "203.0.113.8"}).status_code == 200
    assert rate_limiter.memory_cache["test:203.0.113.7"]["count"] == 2


def test_dependency_fails_closed_without_redis(monkeypatch):
    def unavailable():
        raise redis.ConnectionError("refused")

    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", unavailable)

    assert make_app().get("/limited").status_code == 503


def test_disabled_limiter_is_a_no_op():
    client = make_app()

    for _ in range(5):
        assert client.get("/limited").status_code == 200
