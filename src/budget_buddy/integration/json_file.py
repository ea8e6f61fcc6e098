import asyncio
import json
import os
from typing import Any

from budget_buddy.integration.base import TransactionSource, build_transactions
from budget_buddy.logger import get_logger
from budget_buddy.models import Transaction

logger = get_logger(__name__)


class JsonFileTransactionSource(TransactionSource):
    name = "json"

    def __init__(self, data_path: str = "transactions.json"):
        self.data_path = data_path

    def load(self) -> list[Any]:
        if not os.path.exists(self.data_path):
            logger.warning("[SOURCE] %s not found, no transactions loaded.", self.data_path)
            return []
        try:
            with open(self.data_path, encoding="utf-8") as f:
                payload = json.load(f)
        except json.JSONDecodeError as exc:
            logger.warning("[SOURCE] Could not decode %s: %s", self.data_path, exc)
            return []

        if isinstance(payload, dict):
            payload = payload.get("transactions", [])
        if not isinstance(payload, list):
            logger.warning("[SOURCE] %s does not contain a transaction list.", self.data_path)
            return []
        return payload

    async def fetch_transactions(self) -> list[Transaction]:
        records = await asyncio.to_thread(self.load)
        transactions = build_transactions(records)
        logger.debug("[SOURCE] Loaded %d transaction(s) from %s", len(transactions), self.data_path)
        return transactions
