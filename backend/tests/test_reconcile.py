# Overview: Pytest coverage for payment reconciliation.

from decimal import Decimal

import pytest

from slady.engine.pricing import LineItem
from slady.engine.reconcile import (
    OVERPAID,
    SETTLED,
    UNDERPAID,
    PaymentEntry,
    reconcile,
    require_settled,
    suggest_payment_amount,
)
from slady.errors import PaymentMismatchError

LINES = (
    LineItem("D1001", 2, Decimal("100"), Decimal("10"), Decimal("5")),
    LineItem("Alteration", 1, Decimal("30")),
)


def test_total_is_sum_of_final_prices():
    result = reconcile(LINES, ())
    assert result.total == Decimal("205.00")
    assert result.remaining == Decimal("205.00")
    assert result.status == UNDERPAID


def test_total_does_not_depend_on_line_order():
    assert reconcile(LINES, ()).total == reconcile(tuple(reversed(LINES)), ()).total


def test_settled_when_paid_exactly():
    payments = (PaymentEntry("Cash", Decimal("105")), PaymentEntry("VISA", Decimal("100")))
    result = require_settled(LINES, payments)
    assert result.is_settled
    assert result.status == SETTLED
    assert result.to_dict() == {"total": "205.00", "paid": "205.00", "remaining": "0.00", "status": "settled"}


def test_one_cent_short_is_a_mismatch():
    with pytest.raises(PaymentMismatchError) as exc:
        require_settled(LINES, (PaymentEntry("Cash", Decimal("204.99")),))
    assert exc.value.kind == UNDERPAID
    assert exc.value.remaining == "0.01"
    assert exc.value.status_code == 409


def test_overpaid_has_negative_remaining():
    with pytest.raises(PaymentMismatchError) as exc:
        require_settled(LINES, (PaymentEntry("Cash", Decimal("210")),))
    assert exc.value.kind == OVERPAID
    assert exc.value.remaining == "-5.00"


def test_credit_line_reduces_total():
    lines = LINES + (LineItem("Credit", 1, Decimal("-5")),)
    assert reconcile(lines, ()).total == Decimal("200.00")


def test_suggested_payment_is_what_is_still_owed():
    assert suggest_payment_amount(LINES, (PaymentEntry("Cash", Decimal("5")),)) == Decimal("200.00")


def test_payment_from_dict_accepts_legacy_key():
    payment = PaymentEntry.from_dict({"payment": " Nets ", "amount": "12.3"})
    assert payment.method == "Nets"
    assert payment.to_dict() == {"method": "Nets", "amount": "12.30"}
