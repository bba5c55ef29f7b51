import pytest
import redis

from conftest import PHONE
from resort.api import rate_limit
from resort.core import messages


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    def set(self, key, value, ex=None, nx=False):
        if nx and key in self.counts:
            return None
        self.counts[key] = value
        self.ttls[key] = ex
        return True

    def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, client):
        self.client = client
        self.calls = []

    def set(self, *args, **kwargs):
        self.calls.append(("set", args, kwargs))

    def incr(self, *args):
        self.calls.append(("incr", args, {}))

    def execute(self):
        return [getattr(self.client, name)(*args, **kwargs) for name, args, kwargs in self.calls]


class BrokenRedis:
    def pipeline(self):
        raise redis.ConnectionError("down")


@pytest.fixture
def limits_on(monkeypatch):
    monkeypatch.setattr(rate_limit.settings, "RATE_LIMIT_ENABLED", True)


def test_window_starts_on_first_hit():
    fake = FakeRedis()
    limiter = rate_limit.RateLimiter("t", 2, 60, client=fake)
    assert [limiter.hit("1.2.3.4") for _ in range(3)] == [1, 2, 3]
    assert fake.ttls == {"ratelimit:t:1.2.3.4": 60}


def test_otp_requests_are_limited_per_ip(client, limits_on, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit.otp_limiter, "client", fake)
    limit = rate_limit.otp_limiter.limit

    for _ in range(limit):
        assert client.post("/api/phone/request-otp", json={"phone": PHONE}).status_code == 200
    r = client.post("/api/phone/request-otp", json={"phone": PHONE})
    assert r.status_code == 429
    assert r.json() == {"ok": False, "message": messages.OTP_LIMIT_EXCEEDED}


def test_forwarded_header_from_untrusted_peer_is_ignored(client, limits_on, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit.otp_limiter, "client", fake)
    limit = rate_limit.otp_limiter.limit

    codes = [
        client.post("/api/phone/request-otp", json={"phone": PHONE},
                    headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
        for i in range(limit + 3)
    ]
    assert codes.count(429) == 3
    assert list(fake.counts) == ["ratelimit:otp:testclient"]


def test_trusted_proxy_forwards_client_address(client, limits_on, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit.otp_limiter, "client", fake)
    monkeypatch.setattr(rate_limit.settings, "TRUSTED_PROXIES", "testclient, 10.0.0.1")
    limit = rate_limit.otp_limiter.limit

    for _ in range(limit):
        client.post("/api/phone/request-otp", json={"phone": PHONE}, headers={"X-Forwarded-For": "203.0.113.5"})
    r = client.post("/api/phone/request-otp", json={"phone": PHONE}, headers={"X-Forwarded-For": "203.0.113.5"})
    assert r.status_code == 429

    # The right-most untrusted hop is the client; a spoofed left-most entry does not matter
    r = client.post("/api/phone/request-otp", json={"phone": PHONE},
                    headers={"X-Forwarded-For": "1.1.1.1, 198.51.100.7, 10.0.0.1"})
    assert r.status_code == 200
    assert "ratelimit:otp:198.51.100.7" in fake.counts


def test_unreachable_redis_lets_requests_through(client, limits_on, monkeypatch):
    monkeypatch.setattr(rate_limit.login_limiter, "client", BrokenRedis())
    r = client.post("/api/admin/auth/login", json={"email": "x@resort.test", "password": "nope"})
    assert r.status_code == 401


def test_disabled_limiter_never_touches_redis(client, monkeypatch):
    monkeypatch.setattr(rate_limit.otp_limiter, "client", BrokenRedis())
    for _ in range(rate_limit.otp_limiter.limit + 2):
        assert client.post("/api/phone/request-otp", json={"phone": PHONE}).status_code == 200
