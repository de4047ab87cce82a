"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests

from cachewarmer import config as env
from cachewarmer.api.rendering import PageRenderer
from cachewarmer.configs import load_settings
from cachewarmer.services.automation_driver import AutomationDriver, local_step
from cachewarmer.services.scheduler_service import SchedulerService
from cachewarmer.services.state_machine_factory import CrawlStateMachineFactory


# Process-level environment read once at startup.
#
# Per-request crawl settings (sitemap lists, batch/verify sizes, jitter, key,
# VISUAL_MODE, ...) are NOT here: `load_settings()` re-reads them into an
# immutable WarmerSettings on every invocation.
#
# TRIGGER_PATH (str, default: "/cw-trigger")
#   Route of the crawl trigger endpoint.
#
# HOST / PORT (str / int, default: "0.0.0.0" / 8000)
#   Bind address for `run.py serve`.
#
# WARM_SCHEDULE (crontab str | optional)
#   When set, a full warming chain runs in-process on this schedule.
#
# LOG_LEVEL (str, default: "INFO")
#   Root logging level configured by run.py.
ENV = {
    "TRIGGER_PATH": env.get_str_env("TRIGGER_PATH", "/cw-trigger"),
    "HOST": env.get_str_env("HOST", "0.0.0.0"),
    "PORT": env.get_int_env("PORT", 8000),
    "WARM_SCHEDULE": env.get_optional_str_env("WARM_SCHEDULE"),
    "LOG_LEVEL": env.get_str_env("LOG_LEVEL", "INFO").strip().upper(),
    "API_KEY": env.get_optional_str_env("API_KEY"),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the cache warmer application."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Fresh immutable settings for every call
    settings = providers.Factory(load_settings)

    state_machine_factory = providers.Singleton(
        CrawlStateMachineFactory,
        http_client=providers.Object(requests.get),
    )

    page_renderer = providers.Singleton(PageRenderer)

    automation_driver = providers.Factory(
        AutomationDriver,
        step_fn=providers.Callable(
            local_step,
            settings_provider=settings.provider,
            machine_factory=state_machine_factory,
        ),
    )

    scheduler_service = providers.Singleton(
        SchedulerService,
        schedule=config.WARM_SCHEDULE,
        run_chain=automation_driver.provided.run,
    )
