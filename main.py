import argparse

import uvicorn

from gohive.logging_config import setup_logging
from gohive.routes import APP_FACTORIES
from gohive.settings import settings

SERVICE_PORTS = {
    "gateway": lambda: settings.gateway_port,
    "users": lambda: settings.user_service_port,
    "posts": lambda: settings.post_service_port,
    "mentor": lambda: settings.mentor_service_port,
}


def run(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run one GoHive service")
    parser.add_argument("service", choices=sorted(APP_FACTORIES))
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args(argv)

    # Configure logging once for the whole process.
    setup_logging(args.service)
    app = APP_FACTORIES[args.service]()
    port = args.port or SERVICE_PORTS[args.service]()

    # Use our own logging configuration from gohive.logging_config.
    uvicorn.run(app, host=args.host, port=port, log_config=None)


if __name__ == "__main__":
    run()
