from __future__ import annotations

import argparse

import uvicorn

from app.config import get_settings
from app.observability.logging import configure_logging

_SERVICES = {
    "gateway": ("app.main:gateway_app", 8080),
    "resolver": ("app.main:resolver_app", 8181),
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Zipcode weather lookup services")
    parser.add_argument("service", choices=sorted(_SERVICES), help="Which service to run")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (gateway 8080, resolver 8181)")
    args = parser.parse_args()

    target, default_port = _SERVICES[args.service]
    configure_logging(get_settings().log_level, service=args.service)
    uvicorn.run(
        target,
        host=args.host,
        port=args.port or default_port,
        # Our structlog setup owns the handlers.
        log_config=None,
        timeout_keep_alive=20,
    )


if __name__ == "__main__":
    main()
