# Overview: Pytest coverage for rendered print jobs.

import pytest

from conftest import receipt_payload
from slady.errors import ValidationError
from slady.services import cash_service, print_service, receipt_service
from slady.time_utils import utcnow


def test_receipt_layout(db_session):
    receipt = receipt_service.assemble_receipt(receipt_payload())
    text = print_service.render_receipt(receipt)
    lines = text.splitlines()

    assert lines[0].strip() == "Slady Fashion Pte. Ltd."
    assert all(len(line) <= print_service.WIDTH for line in lines)
    assert "  2 x 100.00 -10% -5.00" in text
    assert any(line.startswith("TOTAL") and line.endswith("205.00") for line in lines)
    assert any(line.startswith("Cash") and line.endswith("105.00") for line in lines)
    assert "Thank you for shopping with us!" in text


def test_voided_receipt_is_marked(db_session):
    receipt = receipt_service.assemble_receipt(receipt_payload())
    receipt = receipt_service.void_receipt(receipt.id)
    assert "*** VOID ***" in print_service.render_receipt(receipt)


def test_label(db_session):
    job = print_service.print_label(store=2, code="D1001", color="Black", size="M", sale_price="59.9")
    assert job.kind == "LABEL"
    assert "SL Studio Pte. Ltd." in job.content
    assert "Black / M" in job.content
    assert "S$ 59.90" in job.content


@pytest.mark.parametrize("missing", ["code", "color", "size", "sale_price"])
def test_label_requires_every_field(db_session, missing):
    fields = {"store": 1, "code": "D1001", "color": "Black", "size": "M", "sale_price": "10"}
    fields[missing] = ""
    with pytest.raises(ValidationError) as exc:
        print_service.print_label(**fields)
    assert exc.value.field == missing


def test_daily_report(db_session):
    today = utcnow().date().isoformat()
    receipt_service.assemble_receipt(receipt_payload())
    cash_service.create_balance(store=1, balance_type=1, amount="100", business_date=today)
    cash_service.create_entry(store=1, entry_type=2, amount="10", remark="parking")

    job = print_service.print_daily_report(store=1, cashier="Mei", business_date=today)

    assert job.kind == "DAILY_REPORT"
    assert "DAILY REPORT" in job.content
    assert "parking" in job.content
    assert "-10.00" in job.content
    expected = [line for line in job.content.splitlines() if line.startswith("Expected closing")]
    assert expected[0].endswith("195.00")


def test_daily_report_requires_cashier(db_session):
    with pytest.raises(ValidationError) as exc:
        print_service.print_daily_report(store=1, cashier="", business_date="2024-05-01")
    assert exc.value.field == "cashier"
