"""Embedded PostgreSQL launcher.

Starts a PostgreSQL cluster inside the store directory using the binaries
shipped with ``pgserver``. The cluster is initialized on first use and
reused on later starts; connections go over a Unix socket in the same
directory, so nothing listens on the network.

The launcher is a process-lifetime singleton. With the default cleanup mode
the engine is stopped when the interpreter exits.
"""

from __future__ import annotations

from pathlib import Path

import pgserver

from pg_http.domain.errors import FatalStartupError
from pg_http.infrastructure.logging import get_logger


logger = get_logger(__name__)


class EmbeddedPostgres:
    """Handle to the embedded engine running against one directory."""

    def __init__(self, server: pgserver.PostgresServer, data_dir: Path) -> None:
        self._server = server
        self._data_dir = data_dir

    @classmethod
    def start(cls, data_dir: str | Path, keep_running: bool = False) -> EmbeddedPostgres:
        """Open the engine against ``data_dir``.

        Args:
            data_dir: A prepared, writable store directory.
            keep_running: Leave the engine up when this process exits.

        Returns:
            The running engine.

        Raises:
            FatalStartupError: If the engine cannot be initialized or started.
        """
        data_dir = Path(data_dir)
        logger.info("engine_starting", data_dir=str(data_dir))
        try:
            server = pgserver.get_server(data_dir, cleanup_mode=None if keep_running else "stop")
        except Exception as e:
            logger.critical("engine_start_failed", data_dir=str(data_dir), error=str(e))
            raise FatalStartupError(f"Failed to start embedded engine in {data_dir}: {e}") from e

        engine = cls(server, data_dir)
        logger.info("engine_started", data_dir=str(data_dir))
        return engine

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def uri(self) -> str:
        """Connection URI for the engine's default database."""
        return self._server.get_uri()

    def stop(self) -> None:
        """Release the engine now instead of at interpreter exit.

        The engine is stopped unless it was started with ``keep_running``.
        """
        self._server.cleanup()
        logger.info("engine_stopped", data_dir=str(self._data_dir))
