"""Tests for the OTP storage backends."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from app.services.otp_store import InMemoryOTPStore, OTPRecord, RedisOTPStore, otp_key


class FakeRedis:
    """Just enough of redis.Redis for RedisOTPStore."""

    def __init__(self) -> None:
        self.store: Dict[str, Any] = {}
        self.expire_times: Dict[str, int] = {}

    def get(self, key: str) -> Optional[bytes]:
        value = self.store.get(key)
        return value.encode("utf-8") if isinstance(value, str) else value

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self.store[key] = value
        if ex is not None:
            self.expire_times[key] = ex
        return True

    def delete(self, key: str) -> int:
        self.expire_times.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0


def _now() -> datetime:
    return datetime.now(timezone.utc)


def test_otp_key_normalizes_email():
    assert otp_key("  Someone@Example.COM ", "registration") == "someone@example.com:registration"


class TestOTPRecord:
    def test_expired_at_exact_boundary(self):
        now = _now()
        assert OTPRecord("123456", now).is_expired(now)
        assert not OTPRecord("123456", now + timedelta(seconds=1)).is_expired(now)

    def test_json_keeps_fields(self):
        expires = datetime(2030, 1, 7, 17, 15, tzinfo=timezone.utc)
        record = OTPRecord.from_json(OTPRecord("654321", expires, verified=True).to_json())
        assert record == OTPRecord("654321", expires, verified=True)

    def test_naive_timestamp_read_as_utc(self):
        record = OTPRecord.from_json('{"code": "111111", "expires_at": "2030-01-07T17:15:00"}')
        assert record.expires_at.tzinfo is not None
        assert record.verified is False


class TestInMemoryOTPStore:
    def test_set_get_delete(self):
        store = InMemoryOTPStore()
        record = OTPRecord("123456", _now() + timedelta(minutes=15))
        store.set("a@example.com:registration", record)
        assert store.get("a@example.com:registration") is record
        store.delete("a@example.com:registration")
        assert store.get("a@example.com:registration") is None
        # deleting twice is harmless
        store.delete("a@example.com:registration")

    def test_sweep(self):
        store = InMemoryOTPStore()
        now = _now()
        store.set("old", OTPRecord("111111", now - timedelta(minutes=1)))
        store.set("new", OTPRecord("222222", now + timedelta(minutes=1)))
        assert store.sweep(now) == 1
        assert len(store) == 1
        assert store.get("new") is not None


class TestRedisOTPStore:
    def test_round_trip_through_redis(self):
        redis = FakeRedis()
        store = RedisOTPStore(redis)
        expires = _now() + timedelta(minutes=15)
        store.set("a@example.com:password-reset", OTPRecord("123456", expires))

        assert "otp:a@example.com:password-reset" in redis.store
        assert 890 <= redis.expire_times["otp:a@example.com:password-reset"] <= 900

        loaded = store.get("a@example.com:password-reset")
        assert loaded.code == "123456"
        assert loaded.expires_at == expires

    def test_expired_record_still_gets_a_ttl(self):
        redis = FakeRedis()
        store = RedisOTPStore(redis, prefix="t:")
        store.set("k", OTPRecord("123456", _now() - timedelta(minutes=5)))
        assert redis.expire_times["t:k"] == 1

    def test_missing_and_delete(self):
        redis = FakeRedis()
        store = RedisOTPStore(redis)
        assert store.get("missing") is None
        store.set("k", OTPRecord("123456", _now() + timedelta(minutes=1)))
        store.delete("k")
        assert store.get("k") is None

    def test_sweep_is_left_to_redis(self):
        assert RedisOTPStore(FakeRedis()).sweep(_now()) == 0
