import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from budget_buddy.api.dependencies import get_export_columns, get_filters, get_transactions
from budget_buddy.domain.errors import NoColumnsSelectedError
from budget_buddy.domain.export import export_filename, to_csv
from budget_buddy.domain.transactions import filter_transactions, sort_transactions, summarize_transactions
from budget_buddy.logger import get_logger
from budget_buddy.models import ExportColumns, Transaction, TransactionFilters
from budget_buddy.services.excel_report import to_excel
from budget_buddy.services.pdf_report import to_pdf
from budget_buddy.services.transaction_data import log_unknown_sort_field

logger = get_logger(__name__)

router = APIRouter(prefix="/api/export")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(content: bytes | str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _export_rows(
    transactions: list[Transaction],
    filters: TransactionFilters,
    sort_field: str | None,
    sort_direction: str | None,
) -> list[Transaction]:
    log_unknown_sort_field(sort_field)
    return sort_transactions(filter_transactions(transactions, filters), sort_field, sort_direction)


@router.get("/csv")
async def export_csv(
    transactions: Annotated[list[Transaction], Depends(get_transactions)],
    filters: Annotated[TransactionFilters, Depends(get_filters)],
    columns: Annotated[ExportColumns, Depends(get_export_columns)],
    sort_field: str | None = "date",
    sort_direction: str | None = "desc",
) -> Response:
    rows = _export_rows(transactions, filters, sort_field, sort_direction)
    try:
        content = to_csv(rows, columns)
    except NoColumnsSelectedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info("[EXPORT] CSV export with %d transaction(s)", len(rows))
    return _attachment(content, "text/csv; charset=utf-8", export_filename("csv"))


@router.get("/excel")
async def export_excel(
    transactions: Annotated[list[Transaction], Depends(get_transactions)],
    filters: Annotated[TransactionFilters, Depends(get_filters)],
    columns: Annotated[ExportColumns, Depends(get_export_columns)],
    sort_field: str | None = "date",
    sort_direction: str | None = "desc",
) -> Response:
    rows = _export_rows(transactions, filters, sort_field, sort_direction)
    try:
        content = await asyncio.to_thread(to_excel, rows, columns)
    except NoColumnsSelectedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info("[EXPORT] Excel export with %d transaction(s)", len(rows))
    return _attachment(content, XLSX_MEDIA_TYPE, export_filename("excel"))


@router.get("/pdf")
async def export_pdf(
    transactions: Annotated[list[Transaction], Depends(get_transactions)],
    filters: Annotated[TransactionFilters, Depends(get_filters)],
    columns: Annotated[ExportColumns, Depends(get_export_columns)],
    sort_field: str | None = "date",
    sort_direction: str | None = "desc",
) -> Response:
    rows = _export_rows(transactions, filters, sort_field, sort_direction)
    summary = summarize_transactions(rows)
    try:
        content = await asyncio.to_thread(to_pdf, rows, columns, summary, filters.date_range)
    except NoColumnsSelectedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info("[EXPORT] PDF export with %d transaction(s)", len(rows))
    return _attachment(content, "application/pdf", export_filename("pdf"))
