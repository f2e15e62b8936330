"""The currently served feed document."""

import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path

from .feed import FeedDocument
from .logging_config import create_execution_logger


@dataclass(frozen=True)
class ServedSnapshot:
    """A built document together with its serialized form."""

    document: FeedDocument
    content: bytes


class SnapshotStore:
    """Holds the single ServedSnapshot and its on-disk cache.

    Readers call :meth:`current` without locking: publishing replaces one
    attribute reference, so a reader sees either the previous or the new
    snapshot, never a mix.
    """

    def __init__(self, output_path: Path | None = None):
        self.output_path = output_path
        self._snapshot: ServedSnapshot | None = None
        self._write_lock = threading.Lock()
        self.logger = create_execution_logger("snapshot")

    def current(self) -> ServedSnapshot | None:
        return self._snapshot

    def publish(
        self, document: FeedDocument, execution_id: str | None = None
    ) -> ServedSnapshot:
        """Serialize ``document`` and make it the served snapshot."""
        snapshot = ServedSnapshot(document=document, content=document.to_xml())
        with self._write_lock:
            self._snapshot = snapshot
            if self.output_path is not None:
                self._write_file(snapshot.content, execution_id)

        self.logger.info(
            f"Published feed with {document.item_count} items",
            execution_id=execution_id or self.logger.execution_id,
            item_count=document.item_count,
        )
        return snapshot

    def _write_file(self, content: bytes, execution_id: str | None) -> None:
        """Write the cache file atomically; failures never affect serving."""
        path = self.output_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            self.logger.error(
                f"Failed to write feed file {path}: {e}",
                execution_id=execution_id or self.logger.execution_id,
                error=str(e),
            )
            return

        self.logger.info(
            f"Feed saved to {path}",
            execution_id=execution_id or self.logger.execution_id,
        )
