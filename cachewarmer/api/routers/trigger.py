import logging
from typing import Callable, Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from cachewarmer.api.auth import require_trigger_key
from cachewarmer.api.payloads import automation_payload, health_payload
from cachewarmer.api.rendering import PageRenderer
from cachewarmer.domain.crawl_position import CrawlPosition
from cachewarmer.domain.mode import Mode
from cachewarmer.domain.settings import WarmerSettings
from cachewarmer.services.state_machine_factory import CrawlStateMachineFactory

logger = logging.getLogger(__name__)


def _self_reference(request: Request, settings: WarmerSettings) -> str:
    if settings.worker_route:
        return settings.worker_route
    url = request.url
    return f"{url.scheme}://{url.netloc}{url.path}"


def create_trigger_router(
    path: str,
    settings_provider: Callable[[], WarmerSettings],
    machine_factory: CrawlStateMachineFactory,
    renderer: Optional[PageRenderer] = None,
):
    """Create the crawl trigger endpoint.

    Settings are loaded per request; the crawl position comes only from the
    query string, so any instance can serve any step of any chain.
    """
    router = APIRouter(tags=["Warmer"])
    pages = renderer or PageRenderer()

    @router.get(path)
    def trigger(request: Request, mode: Optional[str] = None, key: Optional[str] = None):
        current = Mode.parse(mode)

        settings = settings_provider()
        require_trigger_key(settings, current, key)

        if current is Mode.TEST:
            return health_payload()

        position = CrawlPosition.from_params(request.query_params)
        step = machine_factory.create(settings).step(current, position)

        if current.is_automation:
            return automation_payload(step)
        html = pages.render_step(current, step, _self_reference(request, settings), settings)
        return HTMLResponse(html)

    return router
