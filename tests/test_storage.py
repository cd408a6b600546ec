import json
from datetime import timedelta

import pytest

from sdkfox.storage import DISABLED, NEVER_EXPIRE, CacheDuration, FileCache
from sdkfox.utils.exceptions import ValidationError

SECOND = 1_000_000_000


class FakeClock:
    def __init__(self, now: int = 1_000 * SECOND):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * SECOND)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-1, NEVER_EXPIRE),
        ("-1", NEVER_EXPIRE),
        (0, DISABLED),
        ("0", DISABLED),
        (30, CacheDuration(30 * SECOND)),
        ("45", CacheDuration(45 * SECOND)),
        ("12h", CacheDuration(12 * 3600 * SECOND)),
        ("1h30m", CacheDuration(90 * 60 * SECOND)),
        ("250ms", CacheDuration(250_000_000)),
        (timedelta(minutes=2), CacheDuration(120 * SECOND)),
    ],
)
def test_duration_parse(value, expected):
    assert CacheDuration.parse(value) == expected


@pytest.mark.parametrize("value", ["soon", "12x", "h", "1h junk", -5, True])
def test_duration_parse_rejects_invalid(value):
    with pytest.raises(ValidationError):
        CacheDuration.parse(value)


def test_duration_flags_and_text():
    assert NEVER_EXPIRE.never_expires and not NEVER_EXPIRE.disabled
    assert DISABLED.disabled
    assert str(NEVER_EXPIRE) == "-1"
    assert str(DISABLED) == "0"
    assert str(CacheDuration.parse("12h")) == "12h"
    assert str(CacheDuration.parse("1h30m")) == "1h30m"
    assert str(CacheDuration.parse("250ms")) == "250ms"
    assert NEVER_EXPIRE.expire_at(5) == -1
    assert CacheDuration(10).expire_at(5) == 15


def test_file_cache_get_and_set(tmp_path):
    clock = FakeClock()
    cache = FileCache(tmp_path / "cache.json", clock=clock)

    assert cache.get("missing") == (None, False)

    cache.set("a", "1", CacheDuration.parse(60))
    cache.set("nil", None, NEVER_EXPIRE)

    assert cache.get("a") == ("1", True)
    assert cache.get("nil") == (None, True)


def test_file_cache_expiry_drops_entry(tmp_path):
    clock = FakeClock()
    cache = FileCache(tmp_path / "cache.json", clock=clock)
    cache.set("ttl", "v", CacheDuration.parse(10))
    cache.set("forever", "v", NEVER_EXPIRE)

    clock.advance(10)
    assert cache.get("ttl") == ("v", True)

    clock.advance(1)
    assert cache.get("ttl") == (None, False)
    assert "ttl" not in cache.keys()

    clock.advance(10 * 365 * 24 * 3600)
    assert cache.get("forever") == ("v", True)


def test_file_cache_persists_on_close(tmp_path):
    path = tmp_path / "nested" / "cache.json"
    clock = FakeClock()
    cache = FileCache(path, clock=clock)
    cache.set("k", '["x"]', NEVER_EXPIRE)
    cache.set("gone", "v", NEVER_EXPIRE)
    cache.remove("gone")

    cache.close()

    assert json.loads(path.read_text()) == {"k": {"val": '["x"]', "expire": -1}}
    reopened = FileCache.open(path, clock=clock)
    assert reopened.get("k") == ('["x"]', True)
    assert reopened.keys() == ["k"]


def test_file_cache_open_missing_file_is_empty(tmp_path):
    cache = FileCache.open(tmp_path / "absent.json")

    assert cache.keys() == []


def test_file_cache_open_corrupt_file_raises(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(ValueError):
        FileCache.open(path)

    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        FileCache.open(path)


def test_file_cache_skips_malformed_rows(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(
        json.dumps({"ok": {"val": "v", "expire": -1}, "bad": "row", "worse": {"val": 3, "expire": -1}}),
        encoding="utf-8",
    )

    assert FileCache.open(path).keys() == ["ok"]
