"""
Spool — the local durable copy of an undelivered snapshot.

A single JSON file at a fixed path, same shape as the wire body.
Present = a batch is waiting for delivery. Absent = clean state.
Written only after a failed delivery, removed only after a successful one.
"""

import json
import os
import tempfile
from pathlib import Path

from .config import log
from .stats import Snapshot


class Spool:

    def __init__(self, path):
        self.path = Path(path)

    def exists(self):
        try:
            return self.path.exists()
        except OSError:
            return False

    def save(self, snapshot):
        """Atomically overwrite the spool file with this snapshot."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(snapshot.to_dict())
        fd, tmp_path = tempfile.mkstemp(
            prefix=self.path.name + ".", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        log.info("Stats saved to %s", self.path)

    def load(self):
        """
        Read the spooled snapshot. Returns None when there is no file or it
        can't be read/parsed; the agent then starts from zero.
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.info("No spooled stats found, starting from zero")
            return None
        except OSError as e:
            log.warning("Could not read spool %s: %s", self.path, e)
            return None

        try:
            snapshot = Snapshot.from_dict(json.loads(content))
        except (json.JSONDecodeError, ValueError) as e:
            log.warning("Spool %s is corrupt, ignoring it: %s", self.path, e)
            return None

        log.info("Spooled stats loaded from %s", self.path)
        return snapshot

    def clear(self):
        """Remove the spool file if present."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        log.info("Spool cleared")
