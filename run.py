import argparse
import json
import logging
from dataclasses import asdict

import uvicorn

from cachewarmer.api.server import create_app
from cachewarmer.container import Container
from cachewarmer.services.automation_driver import AutomationDriver, http_step

logger = logging.getLogger(__name__)


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sitemap cache warmer")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="run the HTTP trigger service (default)")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    drive = sub.add_parser("drive", help="run a full chain in api mode until done")
    drive.add_argument("--url", default=None, help="remote trigger URL; omit to run in-process")
    drive.add_argument("--key", default=None, help="API key for the remote trigger")
    drive.add_argument("--max-steps", type=int, default=10_000)
    return parser.parse_args(argv)


def main(container: Container = None, argv=None):
    """Entry point. Accepts an injected container for testing."""
    args = _parse_args(argv)
    if container is None:
        container = Container()
    env = container.config()
    logging.basicConfig(
        level=getattr(logging, str(env.get("LOG_LEVEL") or "INFO"), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "drive":
        if args.url:
            driver = AutomationDriver(http_step(args.url, args.key), max_steps=args.max_steps)
        else:
            driver = container.automation_driver(max_steps=args.max_steps)
        summary = driver.run()
        print(json.dumps(asdict(summary)))
        return 0 if summary.status == "done" else 1

    app = create_app(container)
    host = getattr(args, "host", None) or env["HOST"]
    port = getattr(args, "port", None) or env["PORT"]
    logger.info("Cache warmer listening on %s:%s%s", host, port, env["TRIGGER_PATH"])
    uvicorn.run(app, host=host, port=int(port))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
