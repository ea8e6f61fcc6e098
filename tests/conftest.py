import pytest

from budget_buddy.integration.base import TransactionSource
from budget_buddy.models import Transaction


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def make_transaction(
    tx_id: str,
    date: str,
    tx_type: str,
    description: str,
    amount: float,
    category: str | None = None,
) -> Transaction:
    return Transaction(
        id=tx_id,
        date=date,
        type=tx_type,
        description=description,
        amount=amount,
        category_name=category,
    )


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    return [
        make_transaction("1", "2025-01-15", "expense", "Walmart shopping", 150.5, "Groceries"),
        make_transaction("2", "2025-01-10", "income", "Monthly salary", 5000.0, "Salary"),
        make_transaction("3", "2025-01-20", "expense", "Movie tickets", 45.0, "Entertainment"),
        make_transaction("4", "2025-01-05", "expense", "Electric bill", 120.0, "Utilities"),
        make_transaction("5", "2025-01-12", "income", "Project payment", 1500.0, "Freelance"),
    ]


class StaticSource(TransactionSource):
    name = "static"

    def __init__(self, transactions: list[Transaction]):
        self.transactions = transactions
        self.closed = False

    async def fetch_transactions(self) -> list[Transaction]:
        return list(self.transactions)

    async def aclose(self) -> None:
        self.closed = True
