from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from budget_buddy.logger import get_logger
from budget_buddy.models import Transaction

logger = get_logger(__name__)


def _flatten_category(record: dict[str, Any]) -> str | None:
    category = record.get("category_name")
    if isinstance(category, dict):
        category = category.get("name")
    if category is None:
        nested = record.get("categories")
        if isinstance(nested, dict):
            category = nested.get("name")
    return str(category) if category else None


def build_transaction(record: Any) -> Transaction | None:
    """Normalise one raw row into a ``Transaction``; ``None`` when it is unusable."""
    if not isinstance(record, dict):
        logger.warning("[SOURCE] Skipping non-object transaction record: %r", record)
        return None

    data = {
        "id": record.get("id"),
        "date": record.get("date"),
        "type": record.get("type"),
        "description": record.get("description"),
        "amount": record.get("amount"),
        "category_name": _flatten_category(record),
    }
    try:
        return Transaction.model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "[SOURCE] Skipping invalid transaction %s: %d error(s)",
            record.get("id"),
            exc.error_count(),
        )
        return None


def build_transactions(records: list[Any]) -> list[Transaction]:
    transactions = []
    for record in records:
        transaction = build_transaction(record)
        if transaction is not None:
            transactions.append(transaction)
    return transactions


class TransactionSource(ABC):
    name: str = "source"

    @abstractmethod
    async def fetch_transactions(self) -> list[Transaction]:
        """Return every candidate transaction for the current user."""
        pass

    async def aclose(self) -> None:
        return None
