from collections.abc import Sequence
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from budget_buddy.domain.export import UNCATEGORIZED, column_headers, selected_columns
from budget_buddy.domain.formatting import format_currency, format_display_date
from budget_buddy.logger import get_logger
from budget_buddy.models import DateRange, ExportColumns, Transaction, TransactionSummary

logger = get_logger(__name__)

REPORT_TITLE = "Transactions Report"

_PAGE_MARGIN = 14 * mm
_HEADER_FILL = colors.Color(41 / 255, 128 / 255, 185 / 255)
_FIXED_WIDTHS = {
    "date": 25 * mm,
    "type": 20 * mm,
    "category": 30 * mm,
    "amount": 25 * mm,
}


class _FooterCanvas(Canvas):
    """Canvas that stamps "Generated on ... | Page i of n" once the page count is known."""

    def __init__(self, *args, generated_on: str, **kwargs):
        super().__init__(*args, **kwargs)
        self._generated_on = generated_on
        self._saved_page_states: list[dict] = []

    def showPage(self) -> None:  # noqa: N802 (ReportLab API)
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count=page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, *, page_count: int) -> None:
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawCentredString(
            width / 2,
            10 * mm,
            f"Generated on {self._generated_on} | Page {self._pageNumber} of {page_count}",
        )


def _column_widths(keys: Sequence[str], available: float) -> list[float]:
    fixed = sum(_FIXED_WIDTHS[key] for key in keys if key in _FIXED_WIDTHS)
    flexible = max(available - fixed, 30 * mm)
    return [_FIXED_WIDTHS.get(key, flexible) for key in keys]


def _cell(key: str, transaction: Transaction, style: ParagraphStyle) -> str | Paragraph:
    if key == "date":
        return format_display_date(transaction.date)
    if key == "type":
        return transaction.type.value.capitalize()
    if key == "category":
        return Paragraph(escape(transaction.category_name or UNCATEGORIZED), style)
    if key == "description":
        return Paragraph(escape(transaction.description), style)
    return format_currency(transaction.amount)


def _build_table(
    transactions: Sequence[Transaction],
    keys: Sequence[str],
    available_width: float,
) -> Table:
    cell_style = ParagraphStyle(name="Cell", parent=getSampleStyleSheet()["BodyText"], fontSize=8, leading=10)
    rows: list[list] = [column_headers(keys)]
    for transaction in transactions:
        rows.append([_cell(key, transaction, cell_style) for key in keys])

    table = Table(rows, colWidths=_column_widths(keys, available_width), repeatRows=1)
    table_style: list[tuple] = [
        ("BACKGROUND", (0, 0), (-1, 0), _HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
    ]
    if "amount" in keys and len(rows) > 1:
        amount_index = list(keys).index("amount")
        table_style.append(("ALIGN", (amount_index, 1), (amount_index, -1), "RIGHT"))
    table.setStyle(TableStyle(table_style))
    return table


def to_pdf(
    transactions: Sequence[Transaction],
    columns: ExportColumns,
    summary: TransactionSummary,
    date_range: DateRange | None = None,
    generated_at: datetime | None = None,
) -> bytes:
    """Render the transactions report as PDF bytes.

    The column selection is validated before any document is built, so an
    empty selection never produces a partial file.
    """
    keys = selected_columns(columns)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=_PAGE_MARGIN,
        rightMargin=_PAGE_MARGIN,
        topMargin=_PAGE_MARGIN,
        bottomMargin=18 * mm,
        title=REPORT_TITLE,
    )
    styles = getSampleStyleSheet()
    body = ParagraphStyle(name="Body", parent=styles["BodyText"], fontSize=10, leading=13)

    story: list = [Paragraph(REPORT_TITLE, styles["Title"])]
    if date_range and date_range.start and date_range.end:
        story.append(Paragraph(
            escape(
                f"Date range: {format_display_date(date_range.start)} - {format_display_date(date_range.end)}"
            ),
            body,
        ))
    story.extend([
        Spacer(1, 2 * mm),
        Paragraph(f"Total Income: {format_currency(summary.total_income)}", body),
        Paragraph(f"Total Expenses: {format_currency(summary.total_expense)}", body),
        Paragraph(f"Net Balance: {format_currency(summary.balance)}", body),
        Spacer(1, 5 * mm),
        _build_table(transactions, keys, doc.width),
    ])

    generated_on = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    doc.build(
        story,
        canvasmaker=lambda *args, **kwargs: _FooterCanvas(*args, generated_on=generated_on, **kwargs),
    )
    logger.debug("[EXPORT] PDF generated with %d row(s)", len(transactions))
    return buffer.getvalue()
