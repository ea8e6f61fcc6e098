import math
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from typing import Any

from budget_buddy.domain.formatting import parse_calendar_date
from budget_buddy.models import (
    ProcessedTransactions,
    SortDirection,
    SortField,
    Transaction,
    TransactionFilters,
    TransactionSummary,
    TransactionType,
)

SortKey = Callable[[Transaction], Any]

_SORT_KEYS: dict[SortField, SortKey] = {
    SortField.DATE: lambda t: t.date,
    SortField.CATEGORY: lambda t: t.category_name or "",
    SortField.DESCRIPTION: lambda t: t.description,
    SortField.AMOUNT: lambda t: t.amount,
}


def matches_type(transaction: Transaction, type_filter: str) -> bool:
    return type_filter == "all" or transaction.type.value == type_filter


def matches_search_term(transaction: Transaction, search_term: str) -> bool:
    if not search_term:
        return True

    needle = search_term.lower()
    if needle in transaction.description.lower():
        return True
    return bool(transaction.category_name) and needle in transaction.category_name.lower()


def matches_date_range(transaction: Transaction, start: date | None, end: date | None) -> bool:
    if start is not None and transaction.date < start:
        return False
    if end is not None and transaction.date > end:
        return False
    return True


def filter_transactions(
    transactions: Iterable[Transaction],
    filters: TransactionFilters,
) -> list[Transaction]:
    # Unparseable bounds come back as None and impose no constraint.
    start = parse_calendar_date(filters.date_range.start)
    end = parse_calendar_date(filters.date_range.end)
    return [
        t for t in transactions
        if matches_type(t, filters.type)
        and matches_search_term(t, filters.search_term)
        and matches_date_range(t, start, end)
    ]


def resolve_sort_field(field: SortField | str | None) -> SortField | None:
    if isinstance(field, SortField):
        return field
    try:
        return SortField(field)
    except ValueError:
        return None


def resolve_sort_direction(direction: SortDirection | str | None) -> SortDirection:
    if isinstance(direction, SortDirection):
        return direction
    return SortDirection.DESC if direction == SortDirection.DESC.value else SortDirection.ASC


def sort_transactions(
    transactions: Sequence[Transaction],
    field: SortField | str | None,
    direction: SortDirection | str | None = SortDirection.ASC,
) -> list[Transaction]:
    """Return a new list ordered by ``field``.

    Strings compare by code point, so ``"Zebra"`` sorts before ``"apple"``.
    Python's sort is stable in both directions: records with equal keys keep
    their input order whether ascending or descending. An unrecognised field
    leaves the order untouched.
    """
    resolved = resolve_sort_field(field)
    if resolved is None:
        return list(transactions)

    reverse = resolve_sort_direction(direction) is SortDirection.DESC
    return sorted(transactions, key=_SORT_KEYS[resolved], reverse=reverse)


def paginate_transactions(
    transactions: Sequence[Transaction],
    page: int,
    page_size: int,
) -> list[Transaction]:
    if page <= 0 or page_size <= 0:
        return []
    start = (page - 1) * page_size
    return list(transactions[start:start + page_size])


def summarize_transactions(transactions: Iterable[Transaction]) -> TransactionSummary:
    total_income = 0.0
    total_expense = 0.0
    for transaction in transactions:
        if transaction.type is TransactionType.INCOME:
            total_income += transaction.amount
        else:
            total_expense += transaction.amount
    return TransactionSummary(total_income=total_income, total_expense=total_expense)


def count_pages(total_items: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total_items / page_size)


def order_and_paginate(
    filtered: Sequence[Transaction],
    sort_field: SortField | str | None,
    sort_direction: SortDirection | str | None,
    page: int,
    page_size: int,
) -> ProcessedTransactions:
    """Sort and page rows that have already been filtered."""
    ordered = sort_transactions(filtered, sort_field, sort_direction)
    return ProcessedTransactions(
        transactions=paginate_transactions(ordered, page, page_size),
        total_items=len(filtered),
        total_pages=count_pages(len(filtered), page_size),
    )


def process_transactions(
    transactions: Sequence[Transaction],
    filters: TransactionFilters,
    sort_field: SortField | str | None,
    sort_direction: SortDirection | str | None,
    page: int,
    page_size: int,
) -> ProcessedTransactions:
    filtered = filter_transactions(transactions, filters)
    return order_and_paginate(filtered, sort_field, sort_direction, page, page_size)
