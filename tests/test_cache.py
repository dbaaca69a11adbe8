import pytest

from zipradius.core.cache import FileCache, record_cache_stats


def test_file_cache_stale_if_error_returns_expired_value(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=1)

    monkeypatch.setattr("zipradius.core.cache.time.time", lambda: 0)
    cache.set("ns", "k", {"v": 1}, ttl_seconds=1)

    monkeypatch.setattr("zipradius.core.cache.time.time", lambda: 100)

    def builder():
        raise RuntimeError("upstream down")

    with record_cache_stats() as stats:
        val = cache.get_or_set(
            "ns",
            "k",
            builder,
            ttl_seconds=1,
            stale_if_error=True,
            stale_predicate=lambda exc: isinstance(exc, RuntimeError),
        )
    assert val == {"v": 1}
    assert stats.stale_fallbacks == 1
    assert stats.misses == 1


def test_file_cache_stale_if_error_respects_predicate(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=1)

    monkeypatch.setattr("zipradius.core.cache.time.time", lambda: 0)
    cache.set("ns", "k", {"v": 1}, ttl_seconds=1)

    monkeypatch.setattr("zipradius.core.cache.time.time", lambda: 100)

    def builder():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        cache.get_or_set(
            "ns",
            "k",
            builder,
            ttl_seconds=1,
            stale_if_error=True,
            stale_predicate=lambda exc: isinstance(exc, ValueError),
        )


def test_get_or_set_builds_once_then_hits(tmp_path):
    cache = FileCache(tmp_path)
    calls = []

    def builder():
        calls.append(1)
        return [-73.99, 40.75]

    with record_cache_stats() as stats:
        assert cache.get_or_set("geo", "10001", builder) == [-73.99, 40.75]
        assert cache.get_or_set("geo", "10001", builder) == [-73.99, 40.75]

    assert len(calls) == 1
    assert stats.as_dict() == {"hits": 1, "misses": 1, "sets": 1, "stale_fallbacks": 0}


def test_none_results_are_not_cached(tmp_path):
    cache = FileCache(tmp_path)
    assert cache.get_or_set("geo", "00000", lambda: None) is None
    assert cache.get_stale("geo", "00000") is None


def test_disabled_cache_never_stores(tmp_path):
    cache = FileCache(tmp_path, enabled=False)
    cache.set("ns", "k", 1)
    assert cache.get("ns", "k") is None
    assert not any(tmp_path.iterdir())


def test_corrupt_entry_reads_as_miss(tmp_path):
    cache = FileCache(tmp_path)
    cache.set("ns", "k", 1)
    for path in (tmp_path / "ns").rglob("*.json"):
        path.write_text("{not json", encoding="utf-8")
    assert cache.get("ns", "k") is None
