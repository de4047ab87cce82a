from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from cachewarmer.api.continuation import build_next_url
from cachewarmer.domain.crawl_step import CrawlState, CrawlStep
from cachewarmer.domain.fetch_outcome import FetchOutcome
from cachewarmer.domain.mode import Mode
from cachewarmer.domain.settings import WarmerSettings
from cachewarmer.domain.verification_report import VerificationReport
from cachewarmer.utils.formatting import display_path, fmt_size

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _ring_palette(rate: int):
    if rate > 90:
        return "#166534", "rgba(34, 197, 94, 0.4)"
    if rate > 70:
        return "#d97706", "rgba(245, 158, 11, 0.4)"
    return "#dc2626", "rgba(239, 68, 68, 0.4)"


class PageRenderer:
    """Renders the interactive dashboard pages from Jinja2 templates."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["fmt_size"] = fmt_size
        self.env.filters["display_path"] = display_path

    def render_progress(
        self,
        mode: Mode,
        title: str,
        subtitle: str,
        next_url: str,
        progress: int,
        outcomes: Sequence[FetchOutcome],
        total_bytes: int,
        refresh_seconds: int = 1,
    ) -> str:
        template = self.env.get_template("progress.html")
        return template.render(
            mode=mode.value,
            debug=mode is Mode.DEBUG,
            title=title,
            subtitle=subtitle,
            next_url=next_url,
            progress=progress,
            outcomes=outcomes,
            total_bytes=total_bytes,
            refresh_seconds=refresh_seconds,
        )

    def render_report(self, report: VerificationReport) -> str:
        color, glow = _ring_palette(report.hit_rate_percent)
        template = self.env.get_template("report.html")
        return template.render(report=report, ring_color=color, ring_glow=glow)

    def render_step(self, mode: Mode, step: CrawlStep, base_url: str, settings: WarmerSettings) -> str:
        if step.state is CrawlState.VERIFYING and step.report is not None:
            return self.render_report(step.report)

        nxt = step.next_position
        next_url = build_next_url(base_url, mode, nxt, settings) if nxt is not None else base_url
        total_bytes = nxt.cumulative_bytes if nxt is not None else step.position.cumulative_bytes

        if step.state is CrawlState.SITEMAP_ERROR:
            title, subtitle, progress = "⚠️ Sitemap Error", f"Skipping... ({step.error})", 0
        elif step.state is CrawlState.SITEMAP_EXHAUSTED:
            title, subtitle, progress = "Sitemap Complete", "Loading next sitemap...", 100
        else:
            title = f"Warming Sitemap {step.sitemap_number}"
            subtitle = f"Batch {step.batch_start} - {step.batch_end}"
            progress = step.progress

        return self.render_progress(
            mode,
            title,
            subtitle,
            next_url,
            progress,
            step.outcomes,
            total_bytes,
            refresh_seconds=settings.refresh_seconds,
        )
