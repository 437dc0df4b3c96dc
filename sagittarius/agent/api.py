"""
Server API call — push one stats snapshot.

Blocking; called from the flush path with the aggregator lock held.
No retry loop here: a failed push is spooled and retried on the next tick.
"""

import json

import requests

from .config import log
from .constants import API_SECRET_HEADER, API_TIMEOUT_STATS
from . import http_client


def send_stats(config, snapshot):
    """POST the snapshot to the stats endpoint. Returns True on a 2xx."""
    url = config["apiUrl"]
    payload = snapshot.to_dict()
    headers = {API_SECRET_HEADER: config["apiSecret"]}

    try:
        resp = http_client.http.post(url, json=payload, headers=headers,
                                     timeout=API_TIMEOUT_STATS)
    except requests.RequestException as e:
        log.warning("Stats push network error: %s", e)
        log.debug("Unsent payload: %s", json.dumps(payload))
        return False

    if 200 <= resp.status_code < 300:
        log.info(
            "Stats pushed | status=%d | keys=%d clicks=%d wheels=%d (%d events)",
            resp.status_code, snapshot.total_keys, snapshot.total_clicks,
            snapshot.total_wheels, len(snapshot.events),
        )
        return True
    if resp.status_code == 401:
        log.error("Stats push REJECTED (401) — check API_SECRET")
    else:
        log.warning("Stats push failed: HTTP %d — %s", resp.status_code, resp.text[:200])
    log.debug("Unsent payload: %s", json.dumps(payload))
    return False
