from unittest.mock import Mock

import pytest
import requests

from cachewarmer.domain.settings import WarmerSettings
from cachewarmer.exceptions import HttpFetchError
from cachewarmer.services.automation_driver import AutomationDriver, http_step, local_step
from cachewarmer.services.state_machine_factory import CrawlStateMachineFactory
from conftest import FakeHttpClient, urlset


def _scripted(*payloads):
    calls = []
    it = iter(payloads)

    def step(params):
        calls.append(dict(params))
        return next(it)
    return step, calls


def test_follows_continue_records_until_done():
    step, calls = _scripted(
        {"status": "continue", "next_smIdx": 0, "next_offset": 40, "total_bytes": 500, "start_time": 9,
         "batch_count": 40, "current_sitemap_index": 1, "stats": {"hit": 30, "miss": 10, "dynamic": 0, "error": 0}},
        {"status": "continue", "next_smIdx": 1, "next_offset": 0, "total_bytes": 500, "start_time": 9,
         "msg": "Sitemap Done. Moving to next..."},
        {"status": "done", "msg": "All Sitemaps Completed"},
    )

    summary = AutomationDriver(step).run()

    assert summary.status == "done"
    assert summary.steps == 3
    assert summary.batches == 1
    assert summary.urls_warmed == 40
    assert summary.stats["hit"] == 30
    assert summary.total_bytes == 500
    assert calls[0] == {"smIdx": 0, "offset": 0, "totalBytes": 0}
    assert calls[1] == {"smIdx": 0, "offset": 40, "totalBytes": 500, "startTime": 9}
    assert calls[2] == {"smIdx": 1, "offset": 0, "totalBytes": 500, "startTime": 9}


def test_error_record_stops_the_chain():
    step, _ = _scripted({"status": "error", "msg": "⛔ Unauthorized: Invalid or Missing Key"})
    summary = AutomationDriver(step).run()
    assert summary.status == "error"
    assert "Unauthorized" in summary.msg


def test_backwards_sitemap_index_is_rejected():
    step, _ = _scripted(
        {"status": "continue", "next_smIdx": 2, "next_offset": 0, "total_bytes": 0, "start_time": 1},
        {"status": "continue", "next_smIdx": 1, "next_offset": 0, "total_bytes": 0, "start_time": 1},
    )
    summary = AutomationDriver(step).run()
    assert summary.status == "error"
    assert "backwards" in summary.msg


def test_step_limit_aborts():
    step = Mock(return_value={"status": "continue", "next_smIdx": 0, "next_offset": 0, "total_bytes": 0, "start_time": 1})
    summary = AutomationDriver(step, max_steps=3).run()
    assert summary.status == "aborted"
    assert step.call_count == 3


def test_transport_failure_reissues_same_position():
    err = HttpFetchError("http://w/cw", requests.exceptions.ConnectionError("reset"))
    step = Mock(side_effect=[err, {"status": "done"}])
    sleep = Mock()

    summary = AutomationDriver(step, sleep_fn=sleep).run(start_time=5)

    assert summary.status == "done"
    assert step.call_args_list[0] == step.call_args_list[1]
    sleep.assert_called_once()


def test_transport_failure_gives_up_after_retries():
    err = HttpFetchError("http://w/cw", requests.exceptions.ConnectionError("reset"))
    step = Mock(side_effect=err)
    summary = AutomationDriver(step, max_retries=1, sleep_fn=Mock()).run()
    assert summary.status == "error"
    assert "reset" in summary.msg
    assert step.call_count == 2


def test_http_step_sends_api_mode_and_key():
    resp = Mock()
    resp.json.return_value = {"status": "done"}
    client = Mock(return_value=resp)

    payload = http_step("https://w.example/cw-trigger", "s3cret", http_client=client)({"smIdx": 1, "offset": 0, "totalBytes": 0})

    assert payload == {"status": "done"}
    args, kwargs = client.call_args
    assert args == ("https://w.example/cw-trigger",)
    assert kwargs["params"] == {"mode": "api", "smIdx": 1, "offset": 0, "totalBytes": 0, "key": "s3cret"}


def test_http_step_wraps_transport_errors():
    client = Mock(side_effect=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(HttpFetchError):
        http_step("https://w.example/cw-trigger", http_client=client)({})


def test_http_step_wraps_non_json_replies():
    resp = Mock(status_code=502)
    resp.json.side_effect = ValueError("Expecting value: line 1 column 1")
    client = Mock(return_value=resp)
    with pytest.raises(HttpFetchError):
        http_step("https://w.example/cw-trigger", http_client=client)({})


def test_non_json_reply_is_retried():
    bad_gateway = Mock(status_code=502)
    bad_gateway.json.side_effect = ValueError("Expecting value: line 1 column 1")
    done = Mock(status_code=200)
    done.json.return_value = {"status": "done", "msg": "All Sitemaps Completed"}
    client = Mock(side_effect=[bad_gateway, done])
    sleep = Mock()

    summary = AutomationDriver(http_step("https://w.example/cw-trigger", http_client=client), sleep_fn=sleep).run()

    assert summary.status == "done"
    assert client.call_count == 2
    sleep.assert_called_once()


def test_persistent_non_json_replies_end_chain_with_error():
    bad_gateway = Mock(status_code=502)
    bad_gateway.json.side_effect = ValueError("Expecting value")
    client = Mock(return_value=bad_gateway)

    summary = AutomationDriver(
        http_step("https://w.example/cw-trigger", http_client=client), max_retries=2, sleep_fn=Mock()
    ).run()

    assert summary.status == "error"
    assert client.call_count == 3


def test_local_chain_runs_to_done():
    pages = ["https://e.com/a", "https://e.com/b", "https://e.com/c"]
    fake = FakeHttpClient({
        "https://e.com/s1.xml": (200, urlset(*pages)),
        "https://e.com/s2.xml": (500, ""),
        **{p: (200, "abc", {"cf-cache-status": "HIT"}) for p in pages},
    })
    settings = WarmerSettings(
        api_sitemaps=("https://e.com/s1.xml", "https://e.com/s2.xml"),
        batch_size=2,
        jitter_max_ms=0,
    )
    factory = CrawlStateMachineFactory(http_client=fake, sleep_fn=Mock())

    summary = AutomationDriver(local_step(lambda: settings, factory)).run()

    assert summary.status == "done"
    assert summary.batches == 2
    assert summary.urls_warmed == 3
    assert summary.stats["hit"] == 3
    # sitemap document + three 3-byte pages
    assert summary.total_bytes == len(urlset(*pages).encode()) + 9
