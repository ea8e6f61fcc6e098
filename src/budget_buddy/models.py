from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class SortField(str, Enum):
    DATE = "date"
    CATEGORY = "category"
    DESCRIPTION = "description"
    AMOUNT = "amount"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    date: date
    type: TransactionType
    description: str = ""
    amount: float
    category_name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, value: Any) -> Any:
        # Only the calendar day matters; drop any time or offset component.
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10 and value[4] == "-":
            return value[:10]
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class TransactionFilters(BaseModel):
    # "all", "income" or "expense"; any other value matches nothing.
    type: str = "all"
    search_term: str = ""
    date_range: DateRange = Field(default_factory=DateRange)


class TransactionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_income: float = 0.0
    total_expense: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense

    def __add__(self, other: "TransactionSummary") -> "TransactionSummary":
        if not isinstance(other, TransactionSummary):
            return NotImplemented
        return TransactionSummary(
            total_income=self.total_income + other.total_income,
            total_expense=self.total_expense + other.total_expense,
        )


class ProcessedTransactions(BaseModel):
    transactions: list[Transaction]
    total_items: int
    total_pages: int


class ExportColumns(BaseModel):
    date: bool = True
    type: bool = True
    category: bool = True
    description: bool = True
    amount: bool = True
