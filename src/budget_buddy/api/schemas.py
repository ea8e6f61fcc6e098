from pydantic import BaseModel

from budget_buddy.models import ProcessedTransactions, TransactionSummary


class TransactionListResponse(ProcessedTransactions):
    page: int
    page_size: int
    summary: TransactionSummary


class HealthResponse(BaseModel):
    status: str
    source: str
