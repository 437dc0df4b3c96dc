"""Tests for send_stats with the shared HTTP session stubbed out."""

from unittest.mock import Mock

import pytest
import requests

from sagittarius.agent import api, http_client
from sagittarius.agent.stats import Snapshot

CONFIG = {"apiUrl": "http://stats.test/api/stats", "apiSecret": "s3cret"}


@pytest.fixture
def session(monkeypatch):
    session = Mock()
    monkeypatch.setattr(http_client, "http", session)
    return session


def _response(status, text=""):
    resp = Mock()
    resp.status_code = status
    resp.text = text
    return resp


class TestSendStats:

    def test_success_posts_snapshot_with_secret(self, session):
        session.post.return_value = _response(200)
        snap = Snapshot(total_keys=3, events={"KEY_A": 3})

        assert api.send_stats(CONFIG, snap) is True

        args, kwargs = session.post.call_args
        assert args == ("http://stats.test/api/stats",)
        assert kwargs["json"] == snap.to_dict()
        assert kwargs["headers"] == {"X-API-Secret": "s3cret"}
        assert kwargs["timeout"] > 0

    @pytest.mark.parametrize("status", [401, 422, 500, 503])
    def test_non_success_status_fails(self, session, status):
        session.post.return_value = _response(status, "nope")
        assert api.send_stats(CONFIG, Snapshot(events={"KEY_A": 1})) is False

    @pytest.mark.parametrize("exc", [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
    ])
    def test_transport_error_fails(self, session, exc):
        session.post.side_effect = exc
        assert api.send_stats(CONFIG, Snapshot(events={"KEY_A": 1})) is False


class TestHttpClient:

    def test_session_does_not_replay_sent_requests(self):
        session = http_client.create_session()
        retries = session.get_adapter("http://stats.test").max_retries
        assert retries.read == 0
        assert retries.status == 0
        assert retries.backoff_factor == 0
        session.close()
