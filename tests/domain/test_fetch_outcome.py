import pytest

from cachewarmer.domain.fetch_outcome import BatchSummary, CacheStatus, FetchOutcome


@pytest.mark.parametrize("header,expected", [
    (None, CacheStatus.MISS),
    ("", CacheStatus.MISS),
    ("HIT", CacheStatus.HIT),
    ("hit", CacheStatus.HIT),
    ("DYNAMIC", CacheStatus.DYNAMIC),
    ("BYPASS", CacheStatus.BYPASS),
    ("MISS", CacheStatus.MISS),
    ("EXPIRED", CacheStatus.OTHER),
    ("REVALIDATED", CacheStatus.OTHER),
    ("UPDATING", CacheStatus.OTHER),
])
def test_cache_status_from_header(header, expected):
    assert CacheStatus.from_header(header) is expected


def test_error_outcome_shape():
    outcome = FetchOutcome.error("https://e.com/x")
    assert outcome.http_status == "ERR"
    assert outcome.cache_status is CacheStatus.ERR
    assert outcome.response_bytes == 0
    assert outcome.elapsed_ms == 0
    assert outcome.category == "error"


def test_summary_categories_cover_every_outcome():
    outcomes = [
        FetchOutcome("a", 200, CacheStatus.HIT, 10),
        FetchOutcome("b", 200, CacheStatus.MISS, 20),
        FetchOutcome("c", 200, CacheStatus.DYNAMIC, 30),
        FetchOutcome("d", 200, CacheStatus.BYPASS, 40),
        FetchOutcome.error("e"),
    ]
    summary = BatchSummary.from_outcomes(outcomes)
    assert summary.stats() == {"hit": 1, "miss": 1, "dynamic": 2, "error": 1}
    assert summary.count == len(outcomes)
    assert summary.total_bytes == 100


def test_other_upstream_statuses_land_in_error_bucket():
    outcomes = [
        FetchOutcome("a", 200, CacheStatus.OTHER, upstream_status="EXPIRED"),
        FetchOutcome("b", 200, CacheStatus.OTHER, upstream_status="STALE"),
        FetchOutcome("c", 200, CacheStatus.OTHER, upstream_status="UPDATING"),
    ]
    assert BatchSummary.from_outcomes(outcomes).stats() == {"hit": 0, "miss": 0, "dynamic": 0, "error": 3}


def test_badge_prefers_raw_upstream_value():
    assert FetchOutcome("a", 200, CacheStatus.OTHER, upstream_status="STALE").badge == "STALE"
    assert FetchOutcome("a", 200, CacheStatus.MISS).badge == "MISS"
    assert FetchOutcome.error("a").badge == "ERR"
