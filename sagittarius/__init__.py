"""
Sagittarius — keyboard/mouse usage counters.

  classifier.py → identifier naming + category rules (agent and server)
  agent/        → local capture, aggregation, spool, delivery
  server/       → ingest/merge and query API over SQLite
"""

__version__ = "0.3.0"
