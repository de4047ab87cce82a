from typing import Any, Dict

from cachewarmer.domain.crawl_step import CrawlState, CrawlStep
from cachewarmer.utils.datetime_utils import iso_timestamp


def health_payload() -> Dict[str, Any]:
    return {"status": "ok", "msg": "✅ Connection Valid", "timestamp": iso_timestamp()}


def error_payload(msg: str) -> Dict[str, Any]:
    return {"status": "error", "msg": msg}


def automation_payload(step: CrawlStep) -> Dict[str, Any]:
    """Structured status record for the automation profile.

    `done` carries nothing but status and message. Every `continue` record
    carries the full next position; receivers ignore fields they do not know.
    """
    if step.state is CrawlState.COMPLETED or step.next_position is None:
        return {"status": "done", "msg": "All Sitemaps Completed"}

    nxt = step.next_position
    payload: Dict[str, Any] = {
        "status": "continue",
        "next_smIdx": nxt.sitemap_index,
        "next_offset": nxt.offset,
        "total_bytes": nxt.cumulative_bytes,
        "start_time": nxt.start_time,
    }
    if step.state is CrawlState.SITEMAP_ERROR:
        payload["msg"] = f"Skipping Sitemap {step.sitemap_number} ({step.error})"
    elif step.state is CrawlState.SITEMAP_EXHAUSTED:
        payload["msg"] = "Sitemap Done. Moving to next..."
    else:
        payload["msg"] = f"Sitemap {step.sitemap_number} Batch {step.batch_start}-{step.batch_end}"
        payload["batch_count"] = len(step.outcomes)
        payload["current_sitemap_index"] = step.sitemap_number
        payload["stats"] = step.summary.stats()
    return payload
