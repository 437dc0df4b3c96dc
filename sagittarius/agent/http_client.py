"""
HTTP session with connection pooling and SSL CA bundle selection.

Transport retries are limited to connection establishment: a request that
reached the server is never replayed here, because the server merge is
additive. Delivery retries happen at the flush interval instead.
"""

import os

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_retry_strategy = Retry(
    total=None,
    connect=2,                # Connection refused / DNS: request never sent
    read=0,
    status=0,
    other=0,
    backoff_factor=0,
    allowed_methods=["GET", "POST"],
    raise_on_status=False,
)


def _get_ca_bundle():
    """Get the CA bundle path. Priority: env var → certifi."""
    env_ca = os.environ.get('REQUESTS_CA_BUNDLE') or os.environ.get('SSL_CERT_FILE')
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """Create a new requests.Session with connection pooling, retry, and SSL."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=2,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    return session


def reset_session(session):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except Exception:
        pass
    return create_session()


# Global shared session
http = create_session()
