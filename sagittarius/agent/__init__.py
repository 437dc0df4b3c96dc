"""
sagittarius.agent — input stats agent
=====================================
Architecture: capture thread + flush ticker sharing one locked aggregator.

  constants.py    → Version, intervals, timeouts
  config.py       → Paths, logging, config load (config.json + env)
  stats.py        → Snapshot + StatsAggregator (single source of truth)
  spool.py        → Spool (undelivered snapshot on disk)
  http_client.py  → HTTP session with pooling + SSL
  api.py          → send_stats (push one snapshot)
  listeners.py    → InputListeners (pynput → queue → event source)
  app.py          → AgentApp (capture, flush, restore)
  runner.py       → main() + auto-restart wrapper
"""
