import asyncio
import os
from typing import Any

import httpx

from budget_buddy.core import settings
from budget_buddy.integration.base import TransactionSource, build_transactions
from budget_buddy.logger import get_logger
from budget_buddy.models import Transaction

logger = get_logger(__name__)

TRANSACTIONS_SELECT = "id,date,type,description,amount,categories(name)"
DEFAULT_FETCH_PAGE_SIZE = 1000


class SupabaseTransactionSource(TransactionSource):
    """Reads the ``transactions`` table through Supabase's PostgREST endpoint."""

    name = "supabase"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        user_id: str | None = None,
        client: httpx.AsyncClient | None = None,
        page_size: int = DEFAULT_FETCH_PAGE_SIZE,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or os.getenv("SUPABASE_URL") or "").rstrip("/") or None
        self.api_key = api_key or os.getenv("SUPABASE_KEY")
        self.user_id = user_id or os.getenv("SUPABASE_USER_ID")
        self.page_size = max(1, page_size)
        self.timeout = timeout if timeout is not None else settings.get_env_float(
            "SUPABASE_TIMEOUT",
            settings.DEFAULT_SUPABASE_TIMEOUT,
        )
        self.headers = {
            "apikey": self.api_key or "",
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        self._client = client
        self._client_lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is not None and not client.is_closed:
            return client

        async with self._client_lock:
            client = self._client
            if client is None or client.is_closed:
                client = httpx.AsyncClient()
                self._client = client
            return client

    def _params(self, offset: int) -> dict[str, Any]:
        params: dict[str, Any] = {
            "select": TRANSACTIONS_SELECT,
            "order": "date.desc",
            "limit": self.page_size,
            "offset": offset,
        }
        if self.user_id:
            params["user_id"] = f"eq.{self.user_id}"
        return params

    async def fetch_transactions(self) -> list[Transaction]:
        if not self.configured:
            logger.error("[SOURCE] Supabase credentials missing.")
            return []

        client = await self._get_client()
        records: list[Any] = []
        offset = 0
        while True:
            try:
                response = await client.get(
                    f"{self.base_url}/rest/v1/transactions",
                    headers=self.headers,
                    params=self._params(offset),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("[SOURCE] Error fetching transactions from Supabase: %s", exc)
                raise

            page = response.json()
            if not isinstance(page, list):
                logger.warning("[SOURCE] Unexpected Supabase payload type %s", type(page).__name__)
                break
            records.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size

        transactions = build_transactions(records)
        logger.debug("[SOURCE] Fetched %d transaction(s) from Supabase", len(transactions))
        return transactions
