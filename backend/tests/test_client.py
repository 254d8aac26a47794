# Overview: Pytest coverage for the front-end HTTP client against the in-process app.

from decimal import Decimal

import httpx
import pytest

from slady.client import SladyClient
from slady.engine.draft import ReceiptDraft
from slady.engine.pricing import LineItem, alteration_line
from slady.errors import (
    BackendUnavailableError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    PaymentMismatchError,
    ValidationError,
)
from slady.models import Receipt


def _draft():
    draft = ReceiptDraft(store=1, cashier="Mei")
    draft = draft.add_line(LineItem("D1001", 2, Decimal("100"), Decimal("10"), Decimal("5")))
    return draft.add_line(alteration_line("30"))


def _unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


def test_print_receipt_round_trip(api, design):
    draft = _draft().add_payment("Cash", "105").add_payment("VISA")
    receipt = api.print_receipt(draft)

    assert receipt["ref_no"] == "S1-000001"
    assert receipt["total_price"] == "205.00"
    assert api.get_receipt(receipt["id"])["payments"][1] == {"method": "VISA", "amount": "100.00"}
    assert api.lookup_design("D1001")["hot"] == 1


def test_mismatch_never_reaches_the_backend(db_session):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    draft = _draft().add_payment("Cash", "204.99")
    with SladyClient("http://testserver", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(PaymentMismatchError):
            api.print_receipt(draft)
    assert calls == []


def test_local_validation_before_request(api):
    with pytest.raises(ValidationError) as exc:
        api.print_receipt(ReceiptDraft(store=1, cashier="Mei"))
    assert exc.value.field == "items"


def test_server_errors_are_rebuilt(api, item):
    with pytest.raises(InsufficientStockError) as exc:
        api.adjust_stock(item.id, -10)
    assert exc.value.details["requested"] == 10

    with pytest.raises(NotFoundError):
        api.get_receipt(999)


def test_order_helpers(api, item):
    order = api.create_order(item.id, 1, remark="photo shoot")
    assert api.ship_order(order["id"], "2024-05-01")["status_label"] == "shipped"
    assert api.complete_order(order["id"])["pending_date"] is None
    with pytest.raises(InvalidTransitionError):
        api.mark_damaged(order["id"])
    assert api.reset_order(order["id"])["status_label"] == "pending"
    assert [o["id"] for o in api.list_orders(remark="photo")] == [order["id"]]
    assert api.export_orders()[:2] == b"PK"
    assert api.delete_orders([order["id"]]) == 1


def test_stock_helpers(api, design):
    items = api.create_items(design.id, ["LIVE"], ["White"], ["L"], stock=2)
    item_id = items[0]["id"]
    assert api.adjust_stock(item_id, 3) == 5
    assert api.set_stock(item_id, 1, note="recount") == 1
    assert [i["id"] for i in api.list_items(warehouse="LIVE")] == [item_id]


def test_void_and_delete(api, db_session):
    receipt = api.print_receipt(_draft().add_payment("Cash"))
    assert api.void_receipt(receipt["id"])["voided"] is True
    assert api.list_receipts(store=1)[0]["voided"] is True
    api.delete_receipt(receipt["id"])
    assert db_session.query(Receipt).count() == 0


def test_cash_and_reports(api, db_session):
    api.print_receipt(_draft().add_payment("Cash"))
    api.create_drawer_balance(1, "OPENING", Decimal("50"), "2024-05-01")
    entry = api.create_cash_entry(1, "IN", Decimal("5.5"))
    assert entry["amount"] == "5.50"
    api.delete_cash_entry(entry["id"])

    assert api.daily_sales(store=1)["total"] == "205.00"
    assert api.payment_method_sales(store=1)["methods"] == ["Cash"]
    assert api.drawer_summary(1, "2024-05-01")["opening"] == "50.00"
    assert api.open_drawer(1)["store"] == 1


def test_print_jobs(api, db_session):
    assert api.print_label(1, "D1001", "Black", "M", Decimal("100"))["kind"] == "LABEL"
    assert api.print_daily_report(1, "Mei", "2024-05-01")["kind"] == "DAILY_REPORT"


def test_network_failure(caplog):
    with SladyClient("http://testserver", transport=httpx.MockTransport(_unreachable)) as api:
        with pytest.raises(BackendUnavailableError) as exc:
            api.health()
    assert exc.value.details["path"] == "/api/health"
    assert "failed" in caplog.text


def test_server_error_is_unavailable():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))
    with SladyClient("http://testserver", transport=transport) as api:
        with pytest.raises(BackendUnavailableError) as exc:
            api.adjust_stock(1, 1)
    assert exc.value.details["status"] == 502


def test_non_json_client_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(404, text="not here"))
    with SladyClient("http://testserver", transport=transport) as api:
        with pytest.raises(NotFoundError):
            api.get_receipt(1)


def test_malformed_payment_row_is_a_validation_error(api, db_session):
    with pytest.raises(ValidationError) as exc:
        api._json("POST", "/api/receipts/print", json={"store": 1, "cashier": "Mei", "items": [], "payments": ["Cash"]})
    assert exc.value.field == "payments[0]"
