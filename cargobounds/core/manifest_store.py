"""Manifest ownership — snapshot, rewrite and guaranteed restoration.

The manifest on disk is rewritten before every trial. Whatever happens
during a run (normal return, an exception, SIGINT/SIGTERM), the file must
end up byte-identical to what it was when the run started.
"""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path
from types import FrameType, TracebackType

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.exceptions import TOMLKitError

from cargobounds.models.versioning import ManifestSnapshot

logger = logging.getLogger(__name__)


class ManifestError(RuntimeError):
    """Raised when the manifest cannot be read, parsed, written or restored."""


class ManifestStore:
    """Owns the original manifest content and the on-disk manifest file.

    Parameters
    ----------
    path:
        Location of the manifest (normally ``Cargo.toml``).
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._snapshot: ManifestSnapshot | None = None
        self._original: bytes | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def snapshot(self) -> ManifestSnapshot:
        if self._snapshot is None:
            raise ManifestError("manifest has not been checked out")
        return self._snapshot

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def checkout(self) -> ManifestSnapshot:
        """Capture the manifest content. Only the first call reads the file."""
        if self._snapshot is not None:
            return self._snapshot
        try:
            raw = self._path.read_bytes()
            content = raw.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestError(f"cannot read {self._path}: {exc}") from exc
        self._original = raw
        self._snapshot = ManifestSnapshot(path=self._path, content=content)
        logger.debug("Checked out %s (%d bytes)", self._path, len(raw))
        return self._snapshot

    def restore(self) -> None:
        """Write the captured content back verbatim.

        A single synchronous write of bytes captured at checkout, so it is
        safe to call repeatedly and from a signal handler.
        """
        if self._original is None:
            raise ManifestError("manifest has not been checked out")
        try:
            self._path.write_bytes(self._original)
        except OSError as exc:
            raise ManifestError(f"cannot restore {self._path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Document access
    # ------------------------------------------------------------------

    def document(self) -> TOMLDocument:
        """Parse a fresh document from the snapshot, never from the live file."""
        try:
            return tomlkit.parse(self.snapshot.content)
        except TOMLKitError as exc:
            raise ManifestError(f"cannot parse {self._path}: {exc}") from exc

    def write(self, document: TOMLDocument) -> None:
        """Serialize *document* over the on-disk manifest."""
        try:
            self._path.write_bytes(tomlkit.dumps(document).encode("utf-8"))
        except OSError as exc:
            raise ManifestError(f"cannot write {self._path}: {exc}") from exc


class RestorationGuard:
    """Context manager that restores the manifest exactly once on any exit.

    Entering checks the manifest out and installs SIGINT/SIGTERM handlers.
    The handlers and ``__exit__`` share one restoration action that disarms
    after it has run. On a signal the process exits with *exit_code* after
    restoring. A restore failure is logged when another error is already
    propagating, and raised otherwise.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, store: ManifestStore, *, exit_code: int = 1) -> None:
        self._store = store
        self._exit_code = exit_code
        self._armed = False
        self._previous: dict[int, object] = {}

    @property
    def armed(self) -> bool:
        return self._armed

    def __enter__(self) -> ManifestStore:
        self._store.checkout()
        self._armed = True
        if threading.current_thread() is threading.main_thread():
            for signum in self.SIGNALS:
                self._previous[signum] = signal.signal(signum, self._on_signal)
        return self._store

    def discharge(self) -> None:
        """Run the restoration if it has not run yet."""
        if not self._armed:
            return
        try:
            self._store.restore()
            logger.debug("Restored %s", self._store.path)
        finally:
            self._armed = False

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.info("Received signal %d, restoring %s", signum, self._store.path)
        try:
            self.discharge()
        except ManifestError as exc:
            logger.warning("Manifest restoration failed: %s", exc)
        raise SystemExit(self._exit_code)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        try:
            self.discharge()
        except ManifestError as restore_error:
            if exc_type is None:
                raise
            logger.warning("Manifest restoration failed: %s", restore_error)
        finally:
            for signum, handler in self._previous.items():
                # None means the handler was not installed from Python.
                signal.signal(signum, signal.SIG_DFL if handler is None else handler)
            self._previous.clear()
        return False
