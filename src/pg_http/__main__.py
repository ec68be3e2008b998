"""Command-line entry point: ``python -m pg_http`` or ``pg-http``.

Configuration comes from the environment (``PORT``, ``DATA_DIR`` and the
``PG_HTTP_*`` variables, see ``pg_http.infrastructure.config``).
"""

from __future__ import annotations

import sys
from functools import partial

from pg_http.adapters.inbound.rest_api import run_server
from pg_http.adapters.outbound import PostgresSession
from pg_http.application.startup import open_engine
from pg_http.domain.errors import FatalStartupError
from pg_http.infrastructure import (
    get_config,
    get_logger,
    setup_logging,
    setup_metrics,
    setup_tracing,
)


def main() -> int:
    """Start the gateway; returns the process exit status."""
    config = get_config()
    obs = config.observability

    setup_logging(obs.log_level, obs.log_format, service=obs.otel_service_name)
    logger = get_logger(__name__)
    logger.info("starting", port=config.port, data_dir=str(config.store_path))

    if obs.metrics_enabled:
        setup_metrics(obs.metrics_port)
        logger.info("metrics_enabled", port=obs.metrics_port)
    if obs.otel_endpoint or obs.trace_console:
        setup_tracing(obs.otel_service_name, obs.otel_endpoint, console_export=obs.trace_console)
        logger.info("tracing_enabled", endpoint=obs.otel_endpoint, console=obs.trace_console)

    try:
        engine = open_engine(config)
    except FatalStartupError as e:
        logger.critical("startup_failed", error=str(e))
        return 1

    run_server(
        config,
        partial(
            PostgresSession.connect,
            engine.uri,
            relaxed_durability=config.database.relaxed_durability,
        ),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
