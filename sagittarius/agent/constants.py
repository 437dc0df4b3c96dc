"""
Constants: version, intervals, timeouts, default endpoint.
"""

AGENT_VERSION = "0.3.0"

# ─── Intervals ───────────────────────────────────────────────────
FLUSH_INTERVAL_SEC = 10        # Push the snapshot every 10 seconds
LISTENER_CHECK_SEC = 30        # Watchdog: restart dead pynput listeners
QUEUE_POLL_SEC = 0.5           # Capture thread wakes at least this often

# ─── Network ─────────────────────────────────────────────────────
DEFAULT_API_URL = "http://localhost:3000/api/stats"
API_SECRET_HEADER = "X-API-Secret"
API_TIMEOUT_STATS = 15         # Seconds; a timeout counts as a failed delivery

# ─── Scroll ──────────────────────────────────────────────────────
# pynput reports scroll in whole steps, one per wheel detent
PYNPUT_SCROLL_STEP = 1.0

# ─── Files ───────────────────────────────────────────────────────
SPOOL_FILENAME = "stats_backup.json"
LOG_MAX_BYTES = 1_000_000
