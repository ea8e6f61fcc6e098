from collections.abc import Sequence
from io import BytesIO

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from budget_buddy.domain.export import UNCATEGORIZED, column_headers, selected_columns
from budget_buddy.domain.formatting import format_display_date
from budget_buddy.logger import get_logger
from budget_buddy.models import ExportColumns, Transaction

logger = get_logger(__name__)

SHEET_NAME = "Transactions"

_COLUMN_WIDTHS = {
    "date": 15,
    "type": 10,
    "category": 20,
    "description": 30,
    "amount": 15,
}


def _cell(key: str, transaction: Transaction) -> str | float:
    if key == "date":
        return format_display_date(transaction.date)
    if key == "type":
        return transaction.type.value
    if key == "category":
        return transaction.category_name or UNCATEGORIZED
    if key == "description":
        return transaction.description
    return transaction.amount


def to_excel(transactions: Sequence[Transaction], columns: ExportColumns) -> bytes:
    """Render a single "Transactions" sheet as xlsx bytes.

    Amounts stay numeric so the spreadsheet can total them.
    """
    keys = selected_columns(columns)
    frame = pd.DataFrame(
        [[_cell(key, transaction) for key in keys] for transaction in transactions],
        columns=column_headers(keys),
    )

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        sheet = writer.sheets[SHEET_NAME]
        for index, key in enumerate(keys, start=1):
            sheet.cell(row=1, column=index).font = Font(bold=True)
            sheet.column_dimensions[get_column_letter(index)].width = _COLUMN_WIDTHS[key]

    logger.debug("[EXPORT] Excel generated with %d row(s)", len(frame))
    return buffer.getvalue()
