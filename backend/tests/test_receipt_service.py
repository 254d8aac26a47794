# Overview: Pytest coverage for receipt printing, void, reprint and delete.

import pytest

from conftest import receipt_payload
from slady.errors import ConflictError, NotFoundError, PaymentMismatchError, ValidationError
from slady.models import Design, PrintJob, Receipt, ReceiptLine, ReceiptPayment
from slady.services import document_service, receipt_service


def test_print_persists_server_priced_receipt(db_session):
    receipt = receipt_service.assemble_receipt(receipt_payload())

    assert receipt.ref_no == "S1-000001"
    assert receipt.total_cents == 20500
    assert [line.final_price_cents for line in receipt.lines] == [17500, 3000]
    assert receipt.lines[0].discount_percent_bps == 1000
    assert [(p.method, p.amount_cents) for p in receipt.payments] == [("Cash", 10500), ("VISA", 10000)]
    assert receipt.voided is False
    assert receipt.reprint_count == 0


def test_reference_numbers_are_per_store(db_session):
    first = receipt_service.assemble_receipt(receipt_payload())
    second = receipt_service.assemble_receipt(receipt_payload())
    other = receipt_service.assemble_receipt(receipt_payload(store=2))
    assert (first.ref_no, second.ref_no, other.ref_no) == ("S1-000001", "S1-000002", "S2-000001")


def test_client_prices_are_ignored(db_session):
    payload = receipt_payload()
    payload["items"][0]["final_price"] = "1.00"
    receipt = receipt_service.assemble_receipt(payload)
    assert receipt.lines[0].final_price_cents == 17500


def test_client_total_must_match(db_session):
    with pytest.raises(ValidationError) as exc:
        receipt_service.assemble_receipt(receipt_payload(total_price="200.00"))
    assert exc.value.details["computed_total"] == "205.00"
    assert db_session.query(Receipt).count() == 0


def test_one_cent_short_prints_nothing(db_session):
    payments = [{"method": "Cash", "amount": "204.99"}]
    with pytest.raises(PaymentMismatchError) as exc:
        receipt_service.assemble_receipt(receipt_payload(payments=payments))

    assert exc.value.remaining == "0.01"
    assert db_session.query(Receipt).count() == 0
    assert db_session.query(PrintJob).count() == 0


def test_missing_cashier(db_session):
    with pytest.raises(ValidationError) as exc:
        receipt_service.assemble_receipt(receipt_payload(cashier=" "))
    assert exc.value.field == "cashier"


def test_string_store_is_normalized(db_session):
    assert receipt_service.assemble_receipt(receipt_payload(store="2")).store == 2


def test_print_bumps_hotness_and_queues_job(db_session, design):
    receipt = receipt_service.assemble_receipt(receipt_payload())

    db_session.expire_all()
    assert db_session.get(Design, design.id).hot == 1
    job = db_session.query(PrintJob).one()
    assert (job.kind, job.store, job.receipt_id, job.status) == ("RECEIPT", 1, receipt.id, "QUEUED")
    assert "S1-000001" in job.content
    assert "205.00" in job.content


def test_receipts_do_not_move_stock(db_session, item):
    receipt_service.assemble_receipt(receipt_payload())
    db_session.expire_all()
    assert db_session.get(type(item), item.id).stock == 3


class TestVoid:
    def test_void_is_one_way(self, db_session):
        receipt = receipt_service.assemble_receipt(receipt_payload())

        voided = receipt_service.void_receipt(receipt.id)
        assert voided.voided is True
        voided_at = voided.voided_at

        again = receipt_service.set_voided(receipt.id, "1")
        assert again.voided_at == voided_at

        with pytest.raises(ValidationError):
            receipt_service.set_voided(receipt.id, 0)

    def test_void_requires_flag(self, db_session):
        receipt = receipt_service.assemble_receipt(receipt_payload())
        with pytest.raises(ValidationError) as exc:
            receipt_service.set_voided(receipt.id, None)
        assert exc.value.message == "voided is required"
        assert receipt_service.get_receipt(receipt.id).voided is False

    def test_void_keeps_totals(self, db_session):
        receipt = receipt_service.assemble_receipt(receipt_payload())
        assert receipt_service.void_receipt(receipt.id).total_cents == 20500

    def test_void_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            receipt_service.void_receipt(999)


def test_reprint_counts_and_requeues(db_session):
    receipt = receipt_service.assemble_receipt(receipt_payload())
    receipt_service.reprint_receipt(receipt.id)
    receipt = receipt_service.reprint_receipt(receipt.id)

    assert receipt.reprint_count == 2
    assert receipt.total_cents == 20500
    reprints = db_session.query(PrintJob).filter_by(kind="REPRINT").all()
    assert len(reprints) == 2
    assert "*** REPRINT ***" in reprints[0].content


def test_delete_removes_children_but_keeps_print_history(db_session):
    receipt = receipt_service.assemble_receipt(receipt_payload())
    receipt_service.delete_receipt(receipt.id)

    assert db_session.query(Receipt).count() == 0
    assert db_session.query(ReceiptLine).count() == 0
    assert db_session.query(ReceiptPayment).count() == 0
    assert db_session.query(PrintJob).count() == 1
    with pytest.raises(NotFoundError):
        receipt_service.get_receipt(receipt.id)


def test_list_receipts(db_session):
    first = receipt_service.assemble_receipt(receipt_payload())
    second = receipt_service.assemble_receipt(receipt_payload(store=2))
    receipt_service.void_receipt(first.id)

    assert [r.id for r in receipt_service.list_receipts()] == [second.id, first.id]
    assert [r.id for r in receipt_service.list_receipts(store=1)] == [first.id]
    assert [r.id for r in receipt_service.list_receipts(include_voided=False)] == [second.id]
    assert [r.id for r in receipt_service.list_receipts(ref_no="S2-")] == [second.id]
    with pytest.raises(ValidationError):
        receipt_service.list_receipts(store=5)


def test_sub_cent_price_is_rejected_before_storage(db_session):
    payload = receipt_payload(
        items=[{"code": "D1001", "qty": 2, "unit_price": "10.005"}],
        payments=[{"method": "Cash", "amount": "20.01"}],
    )
    with pytest.raises(ValidationError) as exc:
        receipt_service.assemble_receipt(payload)
    assert exc.value.field == "items[0].unit_price"
    assert db_session.query(Receipt).count() == 0


class TestReferenceRace:
    def test_concurrent_first_receipt_is_retried(self, db_session, monkeypatch):
        receipt_service.assemble_receipt(receipt_payload())
        real_bump = document_service._bump
        calls = []

        def row_not_visible_yet(store, document_type):
            calls.append(store)
            if len(calls) == 1:
                return None
            return real_bump(store, document_type)

        monkeypatch.setattr(document_service, "_bump", row_not_visible_yet)
        receipt = receipt_service.assemble_receipt(receipt_payload())

        assert receipt.ref_no == "S1-000002"
        assert len(calls) == 2
        assert db_session.query(Receipt).count() == 2
        assert db_session.query(PrintJob).count() == 2

    def test_persistent_race_is_a_conflict(self, db_session, monkeypatch):
        receipt_service.assemble_receipt(receipt_payload())
        monkeypatch.setattr(document_service, "_bump", lambda store, document_type: None)

        with pytest.raises(ConflictError) as exc:
            receipt_service.assemble_receipt(receipt_payload())
        assert exc.value.status_code == 409
        assert db_session.query(Receipt).count() == 1
