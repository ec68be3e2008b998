"""Storage Location Manager.

Resolves and prepares the directory the embedded engine keeps its cluster
in. Three steps run before the engine is opened:

    1. prepare()          - create the directory and any missing parents
    2. verify_writable()  - write then delete a marker file; fatal on failure
    3. clear_stale_lock() - remove a process lock left by an unclean shutdown

The lock cleanup is best effort: if another engine genuinely holds the
directory, opening the engine is what reports it.
"""

from __future__ import annotations

from pathlib import Path

from pg_http.domain.errors import FatalStartupError
from pg_http.infrastructure.logging import get_logger


logger = get_logger(__name__)


class StorageLocation:
    """The filesystem directory holding the engine's persistent state.

    Attributes:
        path: The store directory.
    """

    def __init__(
        self,
        path: str | Path,
        write_test_name: str = ".write_test",
        lock_file_name: str = "postmaster.pid",
    ) -> None:
        """Initialize the storage location.

        Args:
            path: Store directory (``DATA_DIR/<subdirectory>``).
            write_test_name: Marker file used by the write check.
            lock_file_name: Engine lock file removed by clear_stale_lock().
        """
        self._path = Path(path)
        self._write_test_name = write_test_name
        self._lock_file_name = lock_file_name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_file(self) -> Path:
        return self._path / self._lock_file_name

    def prepare(self) -> Path:
        """Ensure the store directory exists.

        Returns:
            The store directory.

        Raises:
            FatalStartupError: If the directory cannot be created.
        """
        if not self._path.exists():
            logger.info("creating_data_directory", path=str(self._path))
        try:
            self._path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.critical("data_directory_unavailable", path=str(self._path), error=str(e))
            raise FatalStartupError(f"Cannot create data directory {self._path}: {e}") from e
        return self._path

    def verify_writable(self) -> None:
        """Write then delete a marker file inside the store directory.

        Raises:
            FatalStartupError: If either the write or the delete fails. A
                store that cannot be written can never hold durable data.
        """
        marker = self._path / self._write_test_name
        try:
            marker.write_text("ok")
            marker.unlink()
        except OSError as e:
            logger.critical("filesystem_check_failed", path=str(self._path), error=str(e))
            raise FatalStartupError(f"Data directory {self._path} is not writable: {e}") from e
        logger.info("filesystem_check_passed", path=str(self._path))

    def clear_stale_lock(self) -> bool:
        """Remove a leftover engine lock file, if any.

        Failures are logged and swallowed.

        Returns:
            True if a lock file was found and removed.
        """
        lock_file = self.lock_file
        if not lock_file.exists():
            return False

        logger.warning("stale_lock_found", lock_file=str(lock_file))
        try:
            lock_file.unlink()
        except OSError as e:
            logger.error("stale_lock_removal_failed", lock_file=str(lock_file), error=str(e))
            return False

        logger.info("stale_lock_removed", lock_file=str(lock_file))
        return True
