from collections.abc import Callable, Iterable
from datetime import date

from budget_buddy.domain.errors import NoColumnsSelectedError
from budget_buddy.domain.formatting import format_amount, format_display_date
from budget_buddy.logger import get_logger
from budget_buddy.models import ExportColumns, Transaction

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"

EXPORT_EXTENSIONS = {
    "csv": "csv",
    "excel": "xlsx",
    "pdf": "pdf",
}

# Fixed column order shared by every export format.
COLUMN_LABELS: tuple[tuple[str, str], ...] = (
    ("date", "Date"),
    ("type", "Type"),
    ("category", "Category"),
    ("description", "Description"),
    ("amount", "Amount"),
)

_CSV_FIELDS: dict[str, Callable[[Transaction], str]] = {
    "date": lambda t: format_display_date(t.date),
    "type": lambda t: t.type.value,
    "category": lambda t: t.category_name or UNCATEGORIZED,
    "description": lambda t: t.description,
    "amount": lambda t: format_amount(t.amount),
}


def selected_columns(columns: ExportColumns) -> list[str]:
    """Return the selected column keys in export order.

    Raises ``NoColumnsSelectedError`` when nothing is selected so callers can
    abort before producing any output.
    """
    selected = [key for key, _ in COLUMN_LABELS if getattr(columns, key)]
    if not selected:
        raise NoColumnsSelectedError()
    return selected


def column_headers(keys: Iterable[str]) -> list[str]:
    labels = dict(COLUMN_LABELS)
    return [labels[key] for key in keys]


def csv_field(value: str) -> str:
    """Quote ``value`` only when it holds a comma, doubling embedded quotes."""
    if "," not in value:
        return value
    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def to_csv(transactions: Iterable[Transaction], columns: ExportColumns) -> str:
    keys = selected_columns(columns)

    lines = [",".join(column_headers(keys))]
    for transaction in transactions:
        lines.append(",".join(csv_field(_CSV_FIELDS[key](transaction)) for key in keys))

    logger.debug("[EXPORT] CSV generated with %d row(s) and columns %s", len(lines) - 1, ",".join(keys))
    return "\n".join(lines)


def export_filename(fmt: str, today: date | None = None) -> str:
    extension = EXPORT_EXTENSIONS[fmt]
    stamp = (today or date.today()).isoformat()
    return f"transactions_{stamp}.{extension}"
