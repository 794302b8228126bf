"""Unit tests for the cache invalidation webhook client"""

import asyncio
import httpx
import pytest
from unittest.mock import AsyncMock, patch
from prometheus_client import REGISTRY
from ledger_lite.infrastructure.clients.invalidation import (
    CARD_PAYMENT_MUTATION,
    TRANSACTION_MUTATION,
    InvalidationClient,
    user_tags,
)

WEBHOOK_URL = "http://cache.test/invalidate"


def webhook_response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", WEBHOOK_URL))


def failures() -> float:
    return REGISTRY.get_sample_value("invalidation_failures_total") or 0.0


@pytest.fixture
def client() -> InvalidationClient:
    client = InvalidationClient(webhook_url=WEBHOOK_URL)
    client.max_retries = 3
    client.backoff_base = 1.0
    return client


def test_user_tags_are_scoped_to_user():
    assert user_tags("user_123", CARD_PAYMENT_MUTATION) == ["transactions_user_123", "cardSummaries_user_123"]


def test_publish_posts_user_tags(client: InvalidationClient):
    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = webhook_response(200)
        asyncio.run(client.publish("user_123", CARD_PAYMENT_MUTATION))

    mock_post.assert_called_once()
    assert mock_post.call_args.args[0] == WEBHOOK_URL
    assert mock_post.call_args.kwargs["json"] == {"tags": ["transactions_user_123", "cardSummaries_user_123"]}


def test_publish_retries_server_errors_then_succeeds(client: InvalidationClient):
    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post, patch(
        "ledger_lite.infrastructure.clients.invalidation.asyncio.sleep", new_callable=AsyncMock
    ) as mock_sleep:
        mock_post.side_effect = [webhook_response(503), webhook_response(200)]
        asyncio.run(client.publish("user_123", CARD_PAYMENT_MUTATION))

    assert mock_post.call_count == 2
    assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0]


def test_publish_gives_up_silently_after_max_retries(client: InvalidationClient):
    """Test backoff doubles, failures are counted, and nothing is raised"""
    before = failures()

    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post, patch(
        "ledger_lite.infrastructure.clients.invalidation.asyncio.sleep", new_callable=AsyncMock
    ) as mock_sleep:
        mock_post.side_effect = httpx.ConnectError("connection refused")
        asyncio.run(client.publish("user_123", CARD_PAYMENT_MUTATION))

    assert mock_post.call_count == 3
    assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]
    assert failures() - before == 3


def test_publish_without_webhook_url_is_noop():
    client = InvalidationClient()
    client.webhook_url = None

    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
        asyncio.run(client.publish("user_123", CARD_PAYMENT_MUTATION))

    mock_post.assert_not_called()


def test_transaction_mutation_tags_cover_served_views():
    assert user_tags("u1", TRANSACTION_MUTATION) == [
        "transactions_u1",
        "taxes_u1",
        "cardSummaries_u1",
        "installmentDetails_u1",
    ]
