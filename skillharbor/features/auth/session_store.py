"""
Session snapshot storage.

A store keeps at most one serialized Principal. Implementations are swappable:
in-memory for tests and servers, file-backed for clients that must survive a
process restart.
"""
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol


class SessionStore(Protocol):
    def get(self) -> Optional[str]:
        """Return the stored snapshot, or None if there is none."""
        ...

    def set(self, snapshot: str) -> None:
        """Store a snapshot, replacing any previous one."""
        ...

    def clear(self) -> None:
        """Remove the snapshot. A no-op when nothing is stored."""
        ...


class InMemorySessionStore:
    def __init__(self, snapshot: Optional[str] = None):
        self._snapshot = snapshot

    def get(self) -> Optional[str]:
        return self._snapshot

    def set(self, snapshot: str) -> None:
        self._snapshot = snapshot

    def clear(self) -> None:
        self._snapshot = None


class FileSessionStore:
    """Keeps the snapshot in a single UTF-8 file, written atomically."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def get(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, snapshot: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
