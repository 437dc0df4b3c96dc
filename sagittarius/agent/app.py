"""
AgentApp — ties capture, aggregation, spool and delivery together.

Two activities share one StatsAggregator:
  capture thread  — iterates the event source, record() under the lock
  main thread     — every flush interval: flush(), listener watchdog

flush() holds the aggregator lock for the whole attempt, so events that
arrive during a slow push wait in the listener queue instead of racing
the reset.
"""

import threading
import time

from .constants import AGENT_VERSION, LISTENER_CHECK_SEC
from .config import log, safe_print
from .stats import StatsAggregator
from .spool import Spool
from .api import send_stats
from . import http_client


class AgentApp:

    def __init__(self, config, source, stats=None, spool=None, sender=send_stats,
                 listeners=None):
        """
        config:    agent config dict (apiUrl, apiSecret, flushIntervalSec, spoolFile)
        source:    iterable of ClassifiedEvent (lazy, possibly unbounded)
        sender:    callable(config, snapshot) -> bool
        listeners: optional InputListeners, for the watchdog and shutdown
        """
        self._config = config
        self._source = source
        self.stats = stats if stats is not None else StatsAggregator()
        self.spool = spool if spool is not None else Spool(config["spoolFile"])
        self._send = sender
        self._listeners = listeners
        self._stop = threading.Event()
        self._capture_thread = None

    # ─── Startup ─────────────────────────────────────────────

    def restore(self):
        """Fold the spooled snapshot (if any) into the aggregator."""
        snapshot = self.spool.load()
        if snapshot is None:
            return None
        self.stats.restore(snapshot)
        restored = self.stats.snapshot()
        log.info("Stats restored: %d keys, %d clicks, %d scrolls",
                 restored.total_keys, restored.total_clicks, restored.total_wheels)
        return restored

    def run(self):
        """Start capturing, then tick flushes until stop(). Call restore() first."""
        self._capture_thread = threading.Thread(
            target=self.capture, name="capture", daemon=True
        )
        self._capture_thread.start()

        interval = self._config["flushIntervalSec"]
        log.info("v%s started (flush every %ss → %s)",
                 AGENT_VERSION, interval, self._config["apiUrl"])
        safe_print("Waiting for events...\n")

        last_check = time.monotonic()
        try:
            while not self._stop.wait(interval):
                self._tick()
                if self._listeners is not None and time.monotonic() - last_check >= LISTENER_CHECK_SEC:
                    last_check = time.monotonic()
                    self._listeners.check()
        finally:
            if self._listeners is not None:
                self._listeners.stop()
            self._stop.set()
            self.persist()
            log.info("AgentApp shut down.")

    def stop(self):
        self._stop.set()

    def persist(self):
        """Spool whatever is still undelivered (shutdown)."""
        with self.stats.lock:
            snapshot = self.stats.snapshot()
            if snapshot.is_empty:
                return
            try:
                self.spool.save(snapshot)
            except OSError as e:
                log.error("Could not write spool on shutdown: %s", e)

    # ─── Capture ─────────────────────────────────────────────

    def capture(self):
        """Drain the event source into the aggregator. Returns when it ends."""
        for event in self._source:
            self.stats.record(event.identifier, event.delta)
            if self._stop.is_set():
                break

    # ─── Flush ───────────────────────────────────────────────

    def _tick(self):
        try:
            self.flush()
        except Exception as e:
            log.error("flush error: %s", e, exc_info=True)
            http_client.http = http_client.reset_session(http_client.http)

    def flush(self):
        """
        One delivery attempt.
        Returns None when there was nothing to send, True on success,
        False when the snapshot was spooled for the next window.
        """
        with self.stats.lock:
            snapshot = self.stats.snapshot()
            if snapshot.is_empty:
                return None

            log.info("Pushing stats (%d events)...", len(snapshot.events))
            if self._send(self._config, snapshot):
                self.stats.reset()
                try:
                    self.spool.clear()
                except OSError as e:
                    log.warning("Could not remove spool: %s", e)
                log.info("Counters reset")
                return True

            try:
                self.spool.save(snapshot)
            except OSError as e:
                log.error("Could not write spool: %s", e)
            log.warning("Counters NOT reset, retrying in %ss", self._config["flushIntervalSec"])
            return False
