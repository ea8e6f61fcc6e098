from budget_buddy.core import settings
from budget_buddy.domain.transactions import resolve_sort_field
from budget_buddy.integration.base import TransactionSource
from budget_buddy.integration.json_file import JsonFileTransactionSource
from budget_buddy.integration.supabase import SupabaseTransactionSource
from budget_buddy.logger import get_logger
from budget_buddy.models import DateRange, SortField, TransactionFilters

logger = get_logger(__name__)


def create_source(kind: str | None = None) -> TransactionSource:
    source_kind = kind or settings.get_transaction_source()
    if source_kind == settings.SOURCE_SUPABASE:
        source = SupabaseTransactionSource()
        if not source.configured:
            logger.warning("SUPABASE_URL or SUPABASE_KEY not set. Supabase source will return no data.")
        return source
    return JsonFileTransactionSource(data_path=settings.get_transactions_file())


def build_filters(
    type_filter: str = "all",
    search: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> TransactionFilters:
    return TransactionFilters(
        type=type_filter,
        search_term=(search or "").strip(),
        date_range=DateRange(start=start_date or None, end=end_date or None),
    )


def log_unknown_sort_field(sort_field: str | None) -> None:
    if sort_field and resolve_sort_field(sort_field) is None:
        logger.debug(
            "[PIPELINE] Unknown sort field '%s' (expected one of %s); keeping source order.",
            sort_field,
            ", ".join(f.value for f in SortField),
        )
