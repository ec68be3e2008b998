"""Process startup: prepare the store and open the embedded engine.

Runs synchronously before the event loop starts. Any failure here is a
FatalStartupError; the caller exits non-zero without listening.
"""

from __future__ import annotations

from pg_http.adapters.outbound import EmbeddedPostgres, StorageLocation
from pg_http.infrastructure.config import Config
from pg_http.infrastructure.logging import get_logger


logger = get_logger(__name__)


def prepare_storage(config: Config) -> StorageLocation:
    """Create the store directory, clear a stale lock and check writability.

    Raises:
        FatalStartupError: If the directory cannot be created or written.
    """
    storage = StorageLocation(
        config.store_path,
        write_test_name=config.database.write_test_name,
        lock_file_name=config.database.lock_file_name,
    )
    storage.prepare()
    storage.clear_stale_lock()
    storage.verify_writable()
    return storage


def open_engine(config: Config) -> EmbeddedPostgres:
    """Prepare the store and start the engine against it.

    Raises:
        FatalStartupError: If the store is unusable or the engine fails to start.
    """
    storage = prepare_storage(config)
    engine = EmbeddedPostgres.start(
        storage.path,
        keep_running=config.database.keep_engine_running,
    )
    logger.info("engine_ready", data_dir=str(storage.path))
    return engine
