from typing import Annotated

import httpx
from fastapi import Depends, HTTPException, Query, Request

from budget_buddy.integration.base import TransactionSource
from budget_buddy.logger import get_logger
from budget_buddy.models import ExportColumns, Transaction, TransactionFilters
from budget_buddy.services.transaction_data import build_filters

logger = get_logger(__name__)


def get_source(request: Request) -> TransactionSource:
    source = getattr(request.app.state, "source", None)
    if not source:
        raise HTTPException(status_code=500, detail="Transaction source not initialized")
    return source


async def get_transactions(
    source: Annotated[TransactionSource, Depends(get_source)],
) -> list[Transaction]:
    try:
        return await source.fetch_transactions()
    except httpx.HTTPError as exc:
        logger.error("[API] Transaction source '%s' failed: %s", source.name, exc)
        raise HTTPException(status_code=502, detail="Could not load transactions") from exc


def get_filters(
    type_filter: Annotated[str, Query(alias="type")] = "all",
    search: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> TransactionFilters:
    return build_filters(type_filter, search, start_date, end_date)


def get_export_columns(
    date: bool = True,
    type_column: bool = True,
    category: bool = True,
    description: bool = True,
    amount: bool = True,
) -> ExportColumns:
    return ExportColumns(
        date=date,
        type=type_column,
        category=category,
        description=description,
        amount=amount,
    )
