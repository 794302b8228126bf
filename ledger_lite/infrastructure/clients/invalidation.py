"""Cache invalidation webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from enum import Enum
from typing import Iterable, List, Optional
from ledger_lite.config import settings
from ledger_lite.infrastructure.observability.metrics import (
    invalidation_latency_histogram,
    invalidation_failure_counter,
)


class CacheTag(str, Enum):
    TRANSACTIONS = "transactions"
    TAXES = "taxes"
    CARD_SUMMARIES = "cardSummaries"
    BILLING_CYCLES = "billingCycles"
    INSTALLMENT_DETAILS = "installmentDetails"


# Tags to invalidate per kind of mutation
TRANSACTION_MUTATION: List[CacheTag] = [
    CacheTag.TRANSACTIONS,
    CacheTag.TAXES,
    CacheTag.CARD_SUMMARIES,
    CacheTag.INSTALLMENT_DETAILS,
]
BILLING_CYCLE_MUTATION: List[CacheTag] = [CacheTag.BILLING_CYCLES, CacheTag.TRANSACTIONS]
CARD_PAYMENT_MUTATION: List[CacheTag] = [CacheTag.TRANSACTIONS, CacheTag.CARD_SUMMARIES]
TAX_MUTATION: List[CacheTag] = [CacheTag.TAXES]


def user_tags(user_id: str, tags: Iterable[CacheTag]) -> List[str]:
    return [f"{tag.value}_{user_id}" for tag in tags]


class InvalidationClient:
    """Client for signalling cache invalidation after mutations"""

    def __init__(self, webhook_url: Optional[str] = None):
        self.webhook_url = webhook_url or settings.cache_webhook_url
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def publish(self, user_id: str, tags: Iterable[CacheTag]) -> None:
        """
        Send per-user cache tags to the invalidation webhook.

        Fire-and-forget: delivery problems are counted and logged, never raised,
        since the mutation has already been committed.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on 5xx errors and network failures
        """
        if not self.webhook_url:
            return

        payload = {"tags": user_tags(user_id, tags)}
        attempt = 0
        async with httpx.AsyncClient() as client:
            while attempt < self.max_retries:
                try:
                    with invalidation_latency_histogram.time():
                        response = await client.post(
                            self.webhook_url,
                            json=payload,
                            timeout=settings.http_timeout_seconds,
                        )
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    invalidation_failure_counter.inc()

                    if attempt >= self.max_retries:
                        logging.error(
                            f"Cache invalidation failed after {attempt} attempts: {e}",
                            extra={"user_id": user_id, "tags": payload["tags"]},
                        )
                        return

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
