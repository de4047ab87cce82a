import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from cachewarmer.api.payloads import automation_payload
from cachewarmer.domain.crawl_position import CrawlPosition
from cachewarmer.domain.mode import Mode
from cachewarmer.domain.settings import WarmerSettings
from cachewarmer.exceptions import HttpFetchError
from cachewarmer.services.state_machine_factory import CrawlStateMachineFactory

logger = logging.getLogger(__name__)

StepFn = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass
class DriveSummary:
    status: str = "pending"
    steps: int = 0
    batches: int = 0
    urls_warmed: int = 0
    total_bytes: int = 0
    stats: Dict[str, int] = field(default_factory=lambda: {"hit": 0, "miss": 0, "dynamic": 0, "error": 0})
    msg: Optional[str] = None


def local_step(settings_provider: Callable[[], WarmerSettings], machine_factory: CrawlStateMachineFactory) -> StepFn:
    """Step function that runs the automation profile in-process."""
    def step(params: Dict[str, Any]) -> Dict[str, Any]:
        settings = settings_provider()
        machine = machine_factory.create(settings)
        return automation_payload(machine.step(Mode.API, CrawlPosition.from_params(params)))
    return step


def http_step(
    url: str,
    key: Optional[str] = None,
    *,
    http_client: Callable = requests.get,
    timeout: int = 120,
) -> StepFn:
    """Step function that calls a remote trigger endpoint in `api` mode."""
    def step(params: Dict[str, Any]) -> Dict[str, Any]:
        query = {"mode": Mode.API.value}
        query.update(params)
        if key:
            query["key"] = key
        try:
            resp = http_client(url, params=query, timeout=timeout)
            payload = resp.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            # a proxy error page is not JSON; treat it like a dropped connection
            raise HttpFetchError(url, e) from e
        if not isinstance(payload, dict):
            raise HttpFetchError(url, ValueError(f"unexpected payload: {payload!r}"))
        return payload
    return step


class AutomationDriver:
    """Follows `continue` records until the chain reports `done`.

    The driver holds the only copy of the crawl position: each record's
    next_* fields are sent back verbatim on the following call. A failed call
    is re-issued with the same position, so at most one batch is repeated.
    """

    def __init__(
        self,
        step_fn: StepFn,
        *,
        max_steps: int = 10_000,
        max_retries: int = 2,
        retry_delay_seconds: float = 5.0,
        sleep_fn: Callable[[float], None] = time.sleep,
    ):
        self.step_fn = step_fn
        self.max_steps = max_steps
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.sleep_fn = sleep_fn

    def _call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        attempt = 0
        while True:
            try:
                return self.step_fn(params)
            except HttpFetchError as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise
                logger.warning("Step failed (%s); re-issuing same position in %ss", e, self.retry_delay_seconds)
                self.sleep_fn(self.retry_delay_seconds)

    def run(self, start_time: Optional[int] = None) -> DriveSummary:
        summary = DriveSummary()
        params: Dict[str, Any] = {"smIdx": 0, "offset": 0, "totalBytes": 0}
        if start_time is not None:
            params["startTime"] = start_time

        while summary.steps < self.max_steps:
            try:
                payload = self._call(params)
            except HttpFetchError as e:
                summary.status = "error"
                summary.msg = f"step failed after {self.max_retries} retries: {e.original}"
                logger.error("Chain stopped: %s", summary.msg)
                return summary
            summary.steps += 1
            status = payload.get("status")
            summary.msg = payload.get("msg")

            if status == "done":
                summary.status = "done"
                logger.info("Chain complete after %s steps (%s batches)", summary.steps, summary.batches)
                return summary
            if status != "continue":
                summary.status = status or "error"
                logger.error("Chain stopped: %s", summary.msg)
                return summary

            next_idx = int(payload.get("next_smIdx", params["smIdx"]))
            if next_idx < int(params["smIdx"]):
                summary.status = "error"
                summary.msg = f"sitemap index moved backwards ({params['smIdx']} -> {next_idx})"
                logger.error("Chain stopped: %s", summary.msg)
                return summary

            if "stats" in payload:
                summary.batches += 1
                summary.urls_warmed += int(payload.get("batch_count", 0))
                for name, count in payload["stats"].items():
                    summary.stats[name] = summary.stats.get(name, 0) + int(count)
            else:
                logger.info("%s", summary.msg)

            params = {
                "smIdx": next_idx,
                "offset": int(payload.get("next_offset", 0)),
                "totalBytes": int(payload.get("total_bytes", params["totalBytes"])),
            }
            if "start_time" in payload:
                params["startTime"] = payload["start_time"]
            elif start_time is not None:
                params["startTime"] = start_time
            summary.total_bytes = params["totalBytes"]

        summary.status = "aborted"
        summary.msg = f"step limit {self.max_steps} reached"
        logger.warning("Chain aborted: %s", summary.msg)
        return summary
