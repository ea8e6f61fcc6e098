from typing import Annotated

from fastapi import APIRouter, Depends

from budget_buddy.api.dependencies import get_filters, get_source, get_transactions
from budget_buddy.api.schemas import HealthResponse, TransactionListResponse
from budget_buddy.core import settings
from budget_buddy.domain.transactions import filter_transactions, order_and_paginate, summarize_transactions
from budget_buddy.integration.base import TransactionSource
from budget_buddy.models import Transaction, TransactionFilters, TransactionSummary
from budget_buddy.services.transaction_data import log_unknown_sort_field

router = APIRouter()


@router.get("/api/transactions", response_model=TransactionListResponse)
async def list_transactions(
    transactions: Annotated[list[Transaction], Depends(get_transactions)],
    filters: Annotated[TransactionFilters, Depends(get_filters)],
    sort_field: str | None = "date",
    sort_direction: str | None = "desc",
    page: int = 1,
    limit: int | None = None,
) -> TransactionListResponse:
    page_size = limit if limit is not None else settings.get_default_page_size()
    log_unknown_sort_field(sort_field)

    # The summary covers every filtered row, not just the requested page.
    filtered = filter_transactions(transactions, filters)
    processed = order_and_paginate(filtered, sort_field, sort_direction, page, page_size)
    summary = summarize_transactions(filtered)

    return TransactionListResponse(
        transactions=processed.transactions,
        total_items=processed.total_items,
        total_pages=processed.total_pages,
        page=page,
        page_size=page_size,
        summary=summary,
    )


@router.get("/api/transactions/summary", response_model=TransactionSummary)
async def transactions_summary(
    transactions: Annotated[list[Transaction], Depends(get_transactions)],
    filters: Annotated[TransactionFilters, Depends(get_filters)],
) -> TransactionSummary:
    return summarize_transactions(filter_transactions(transactions, filters))


@router.get("/health", response_model=HealthResponse)
async def health(
    source: Annotated[TransactionSource, Depends(get_source)],
) -> HealthResponse:
    return HealthResponse(status="ok", source=source.name)
