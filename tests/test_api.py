import csv
import io
import logging
from io import BytesIO
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from budget_buddy.api.routes import transactions as transactions_routes
from budget_buddy.app import create_app
from budget_buddy.integration.base import TransactionSource
from conftest import StaticSource


@pytest.fixture
def source(sample_transactions) -> StaticSource:
    return StaticSource(sample_transactions)


@pytest.fixture
def client(source: StaticSource) -> TestClient:
    return TestClient(create_app(source=source))


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "source": "static"}


def test_list_transactions_defaults_to_newest_first(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "2")
    response = client.get("/api/transactions")
    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data["transactions"]] == ["3", "1"]
    assert data["total_items"] == 5
    assert data["total_pages"] == 3
    assert data["page"] == 1
    assert data["page_size"] == 2


def test_list_transactions_with_filters_and_paging(client: TestClient) -> None:
    response = client.get(
        "/api/transactions",
        params={
            "type": "expense",
            "sort_field": "amount",
            "sort_direction": "asc",
            "page": 2,
            "limit": 2,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data["transactions"]] == ["1"]
    assert data["total_items"] == 3
    assert data["total_pages"] == 2
    # Summary covers the whole filtered set, not the page.
    assert data["summary"] == {"total_income": 0.0, "total_expense": 315.5, "balance": -315.5}


def test_list_transactions_payload_shape(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"search": "walmart"})
    assert response.status_code == 200
    assert response.json()["transactions"] == [{
        "id": "1",
        "date": "2025-01-15",
        "type": "expense",
        "description": "Walmart shopping",
        "amount": 150.5,
        "category_name": "Groceries",
    }]


def test_unknown_sort_field_keeps_source_order(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"sort_field": "merchant", "limit": 10})
    assert response.status_code == 200
    assert [t["id"] for t in response.json()["transactions"]] == ["1", "2", "3", "4", "5"]


def test_unknown_type_filter_matches_nothing(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"type": "transfer"})
    assert response.status_code == 200
    data = response.json()
    assert data["transactions"] == []
    assert data["total_items"] == 0
    assert data["summary"] == {"total_income": 0.0, "total_expense": 0.0, "balance": 0.0}


def test_unknown_sort_direction_sorts_ascending(client: TestClient) -> None:
    response = client.get(
        "/api/transactions",
        params={"sort_field": "amount", "sort_direction": "sideways", "limit": 10},
    )
    assert response.status_code == 200
    assert [t["id"] for t in response.json()["transactions"]] == ["3", "4", "1", "5", "2"]


def test_list_transactions_filters_once(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = Mock(wraps=transactions_routes.filter_transactions)
    monkeypatch.setattr(transactions_routes, "filter_transactions", calls)
    response = client.get("/api/transactions", params={"type": "income"})
    assert response.status_code == 200
    assert response.json()["total_items"] == 2
    assert calls.call_count == 1


def test_summary_endpoint(client: TestClient) -> None:
    response = client.get(
        "/api/transactions/summary",
        params={"start_date": "2025-01-10", "end_date": "2025-01-15"},
    )
    assert response.status_code == 200
    assert response.json() == {"total_income": 6500.0, "total_expense": 150.5, "balance": 6349.5}


def test_export_csv(client: TestClient) -> None:
    response = client.get(
        "/api/export/csv",
        params={"type": "income", "sort_field": "amount", "sort_direction": "desc", "description": "false"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="transactions_')
    assert disposition.endswith('.csv"')

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Date", "Type", "Category", "Amount"]
    assert rows[1] == ["Jan 10, 2025", "income", "Salary", "5000.00"]
    assert rows[2] == ["Jan 12, 2025", "income", "Freelance", "1500.00"]


def test_export_without_columns_is_bad_request(client: TestClient) -> None:
    params = {"date": "false", "type_column": "false", "category": "false", "description": "false", "amount": "false"}
    for path in ("/api/export/csv", "/api/export/excel", "/api/export/pdf"):
        response = client.get(path, params=params)
        assert response.status_code == 400
        assert response.json()["detail"] == "Please select at least one column to export"


def test_export_csv_unknown_direction_is_ascending(client: TestClient) -> None:
    response = client.get(
        "/api/export/csv",
        params={"sort_field": "amount", "sort_direction": "up", "type_column": "false", "date": "false"},
    )
    assert response.status_code == 200
    amounts = [line.rsplit(",", 1)[1] for line in response.text.split("\n")[1:]]
    assert amounts == ["45.00", "120.00", "150.50", "1500.00", "5000.00"]


def test_export_excel(client: TestClient) -> None:
    response = client.get("/api/export/excel", params={"type": "expense", "sort_field": "amount"})
    assert response.status_code == 200
    assert response.headers["content-type"] == (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert response.headers["content-disposition"].endswith('.xlsx"')

    sheet = load_workbook(BytesIO(response.content))["Transactions"]
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0] == ("Date", "Type", "Category", "Description", "Amount")
    assert [row[4] for row in rows[1:]] == [150.5, 120, 45]


def test_export_pdf(client: TestClient) -> None:
    response = client.get("/api/export/pdf", params={"start_date": "2025-01-01", "end_date": "2025-01-31"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_source_failure_maps_to_bad_gateway() -> None:
    failing = AsyncMock(spec=TransactionSource)
    failing.name = "mock"
    failing.fetch_transactions.side_effect = httpx.ConnectError("unreachable")
    client = TestClient(create_app(source=failing))

    response = client.get("/api/transactions")
    assert response.status_code == 502


def test_lifespan_closes_source(source: StaticSource) -> None:
    with TestClient(create_app(source=source)) as client:
        assert client.get("/health").status_code == 200
    assert source.closed is True


def test_requests_are_logged_with_status_and_duration(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="budget_buddy.access"):
        client.get("/api/transactions", params={"type": "transfer"})

    [record] = [r for r in caplog.records if r.name == "budget_buddy.access"]
    message = record.getMessage()
    assert message.startswith("GET /api/transactions -> 200 (")
    assert message.endswith("ms)") or message.endswith(" s)")
