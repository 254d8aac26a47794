# Overview: Pytest coverage for the receipt draft value object.

from dataclasses import replace
from decimal import Decimal

import pytest

from slady.engine.draft import ReceiptDraft
from slady.engine.pricing import LineItem, alteration_line
from slady.errors import PaymentMismatchError, ValidationError


def _draft(**kwargs):
    base = ReceiptDraft(store=1, cashier="Mei")
    base = base.add_line(LineItem("D1001", 2, Decimal("100"), Decimal("10"), Decimal("5")))
    base = base.add_line(alteration_line("30"))
    return replace(base, **kwargs)


class TestEditing:
    def test_edits_return_new_drafts(self):
        empty = ReceiptDraft(store=1, cashier="Mei")
        one = empty.add_line(LineItem("D1", 1, Decimal("10")))
        assert empty.lines == ()
        assert len(one.lines) == 1

    def test_add_payment_prefills_remaining(self):
        draft = _draft().add_payment("Cash", "105").add_payment("VISA")
        assert draft.payments[1].amount == Decimal("100.00")
        assert draft.reconcile().is_settled

    def test_add_payment_without_lines(self):
        with pytest.raises(ValidationError) as exc:
            ReceiptDraft(store=1, cashier="Mei").add_payment("Cash")
        assert exc.value.field == "items"

    def test_replace_and_remove(self):
        draft = _draft().replace_line(1, alteration_line("40")).remove_line(0)
        assert draft.total == Decimal("40.00")
        draft = draft.add_payment("Cash").remove_payment(0)
        assert draft.payments == ()

    def test_cleared_keeps_store_and_cashier(self):
        cleared = _draft().add_payment("Cash").cleared()
        assert (cleared.store, cleared.cashier, cleared.lines, cleared.payments) == (1, "Mei", (), ())


class TestValidate:
    def test_valid_draft(self):
        result = _draft().add_payment("Cash").validate()
        assert result.total == Decimal("205.00")

    def test_cashier_required(self):
        with pytest.raises(ValidationError) as exc:
            _draft(cashier="").add_payment("Cash").validate()
        assert exc.value.field == "cashier"

    def test_unknown_store(self):
        with pytest.raises(ValidationError) as exc:
            _draft(store=3).add_payment("Cash").validate()
        assert exc.value.field == "store"

    def test_at_least_one_item(self):
        with pytest.raises(ValidationError):
            ReceiptDraft(store=1, cashier="Mei").validate()

    def test_bad_quantity_is_reported_with_its_line(self):
        draft = _draft().replace_line(0, LineItem("D1001", 0, Decimal("100")))
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash").validate()
        assert exc.value.field == "items[0].qty"

    def test_discount_percent_over_100(self):
        draft = _draft().replace_line(1, LineItem("X", 1, Decimal("10"), Decimal("101")))
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash", "0").validate()
        assert exc.value.field == "items[1].discount_percent"

    def test_payment_method_required(self):
        with pytest.raises(ValidationError) as exc:
            _draft().add_payment("").validate()
        assert exc.value.field == "payments[0].method"

    def test_field_errors_come_before_payment_check(self):
        with pytest.raises(ValidationError):
            _draft(cashier="").add_payment("Cash", "1").validate()

    def test_unsettled_draft(self):
        with pytest.raises(PaymentMismatchError):
            _draft().add_payment("Cash", "204.99").validate()


def test_from_dict_and_payload():
    draft = ReceiptDraft.from_dict({
        "store": 2,
        "cashier": " Ann ",
        "items": [{"code": "D1", "qty": "2", "unit_price": "50"}],
        "payments": [{"method": "Nets", "amount": 100}],
    })
    assert draft.cashier == "Ann"
    payload = draft.to_payload()
    assert payload["store"] == 2
    assert payload["total_price"] == "100.00"
    assert payload["items"][0]["final_price"] == "100.00"
    assert payload["payments"] == [{"method": "Nets", "amount": "100.00"}]


class TestInputBounds:
    def test_missing_store_is_required(self):
        draft = ReceiptDraft.from_dict({"cashier": "Mei", "items": [{"code": "D1", "unit_price": "10"}]})
        assert draft.store is None
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash").validate()
        assert exc.value.field == "store"
        assert exc.value.message == "store is required"

    def test_items_must_be_a_list(self):
        with pytest.raises(ValidationError) as exc:
            ReceiptDraft.from_dict({"store": 1, "items": "D1001"})
        assert exc.value.field == "items"

    def test_payment_rows_must_be_objects(self):
        with pytest.raises(ValidationError) as exc:
            ReceiptDraft.from_dict({"store": 1, "items": [], "payments": ["Cash"]})
        assert exc.value.field == "payments[0]"

    def test_huge_unit_price(self):
        draft = _draft().replace_line(0, LineItem("D1001", 1, Decimal("1e30")))
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash", "1").validate()
        assert exc.value.field == "items[0].unit_price"

    def test_huge_payment(self):
        with pytest.raises(ValidationError) as exc:
            _draft().add_payment("Cash", "1e30").validate()
        assert exc.value.field == "payments[0].amount"

    def test_line_final_price_over_ceiling(self):
        draft = _draft().replace_line(0, LineItem("D1001", 9999, Decimal("9999999.99")))
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash").validate()
        assert exc.value.field == "items[0].final_price"

    def test_sub_cent_unit_price(self):
        draft = _draft().replace_line(0, LineItem("D1001", 2, Decimal("10.005")))
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash").validate()
        assert exc.value.field == "items[0].unit_price"

    def test_sub_cent_payment(self):
        with pytest.raises(ValidationError) as exc:
            _draft().add_payment("Cash", "205.001").validate()
        assert exc.value.field == "payments[0].amount"

    def test_quantity_ceiling(self):
        draft = _draft().replace_line(0, LineItem("D1001", 10000, Decimal("1")))
        with pytest.raises(ValidationError) as exc:
            draft.add_payment("Cash").validate()
        assert exc.value.field == "items[0].qty"
