"""
sagittarius.server — stats ingest/query API

  settings.py → environment settings
  schemas.py  → pydantic wire models
  store.py    → StatsStore (SQLite counters + sync metadata)
  routes.py   → /api/stats (POST, GET), /health
  main.py     → create_app() + uvicorn entry point
"""
