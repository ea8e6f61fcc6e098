from datetime import datetime

import pytest
from reportlab.lib.units import mm

from budget_buddy.domain.errors import NoColumnsSelectedError
from budget_buddy.domain.transactions import summarize_transactions
from budget_buddy.models import DateRange, ExportColumns
from budget_buddy.services.pdf_report import _column_widths, to_pdf
from conftest import make_transaction


def test_pdf_is_rendered(sample_transactions):
    content = to_pdf(
        sample_transactions,
        ExportColumns(),
        summarize_transactions(sample_transactions),
        DateRange(start="2025-01-01", end="2025-01-31"),
        generated_at=datetime(2025, 2, 1, 9, 30),
    )
    assert content.startswith(b"%PDF")
    assert content.rstrip().endswith(b"%%EOF")


def test_pdf_handles_markup_characters_and_long_lists():
    transactions = [
        make_transaction(str(i), "2025-01-01", "expense", f"Fish & chips <large> #{i}", 12.0, "Food & Drink")
        for i in range(120)
    ]
    content = to_pdf(transactions, ExportColumns(), summarize_transactions(transactions))
    assert content.startswith(b"%PDF")


def test_pdf_with_empty_transactions():
    content = to_pdf([], ExportColumns(date=False), summarize_transactions([]))
    assert content.startswith(b"%PDF")


def test_pdf_requires_a_column(sample_transactions):
    none_selected = ExportColumns(date=False, type=False, category=False, description=False, amount=False)
    with pytest.raises(NoColumnsSelectedError):
        to_pdf(sample_transactions, none_selected, summarize_transactions(sample_transactions))


def test_description_column_takes_remaining_width():
    widths = _column_widths(["date", "description", "amount"], 180 * mm)
    assert widths[0] == 25 * mm
    assert widths[2] == 25 * mm
    assert widths[1] == pytest.approx(130 * mm)
