"""Tests for medicine issuance: stock checks, rollback and concurrent issues."""
import logging
import threading

import pytest

from hms.core.errors import InsufficientStock, InvalidInput, InvalidReference, NotFound
from hms.models.medicine import Medicine, MedicineIssue
from hms.services.medicine_issuance import issue_medicine, restock_medicine


def _stock(session_factory, medicine_id):
    with session_factory() as db:
        return db.query(Medicine).filter(Medicine.id == medicine_id).one().quantity


def _issue_count(session_factory, medicine_id):
    with session_factory() as db:
        return db.query(MedicineIssue).filter(MedicineIssue.medicine_id == medicine_id).count()


class TestIssue:
    def test_issue_decrements_and_records(self, session_factory, make_medicine, make_patient, make_user):
        medicine_id, patient_id, issuer_id = make_medicine(quantity=10), make_patient(), make_user()
        with session_factory() as db:
            issue = issue_medicine(
                db, medicine_id, patient_id, quantity=3, issued_by=issuer_id, instructions="1 tablet / 8h"
            )
            assert issue.quantity == 3
            assert issue.issued_by == issuer_id
            assert issue.instructions == "1 tablet / 8h"
            assert issue.issued_at is not None

        assert _stock(session_factory, medicine_id) == 7
        assert _issue_count(session_factory, medicine_id) == 1

    def test_issue_entire_stock(self, session_factory, make_medicine, make_patient):
        medicine_id = make_medicine(quantity=4)
        with session_factory() as db:
            issue_medicine(db, medicine_id, make_patient(), quantity=4)
        assert _stock(session_factory, medicine_id) == 0

    def test_insufficient_stock_leaves_quantity(self, session_factory, make_medicine, make_patient):
        medicine_id = make_medicine(quantity=2)
        with session_factory() as db:
            with pytest.raises(InsufficientStock):
                issue_medicine(db, medicine_id, make_patient(), quantity=5)

        assert _stock(session_factory, medicine_id) == 2
        assert _issue_count(session_factory, medicine_id) == 0

    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5, "2", None])
    def test_quantity_must_be_positive_int(self, session_factory, make_medicine, make_patient, quantity):
        medicine_id = make_medicine(quantity=10)
        with session_factory() as db:
            with pytest.raises(InvalidInput):
                issue_medicine(db, medicine_id, make_patient(), quantity=quantity)
        assert _stock(session_factory, medicine_id) == 10

    def test_missing_medicine(self, session_factory, make_patient):
        with session_factory() as db:
            with pytest.raises(NotFound):
                issue_medicine(db, "no-such-medicine", make_patient(), quantity=1)

    def test_missing_patient_blocks_issue(self, session_factory, make_medicine):
        medicine_id = make_medicine(quantity=10)
        with session_factory() as db:
            with pytest.raises(InvalidReference):
                issue_medicine(db, medicine_id, "no-such-patient", quantity=1)
        assert _stock(session_factory, medicine_id) == 10

    def test_low_stock_warning_logged(self, session_factory, make_medicine, make_patient, caplog):
        medicine_id = make_medicine(quantity=5, min_threshold=3)
        with caplog.at_level(logging.WARNING, logger="hms.services.medicine_issuance"):
            with session_factory() as db:
                issue_medicine(db, medicine_id, make_patient(), quantity=2)
        assert any("low on stock" in r.getMessage() for r in caplog.records)


class TestRestock:
    def test_restock_adds_quantity(self, session_factory, make_medicine):
        medicine_id = make_medicine(quantity=1)
        with session_factory() as db:
            assert restock_medicine(db, medicine_id, 9).quantity == 10

    def test_restock_rejects_non_positive(self, session_factory, make_medicine):
        medicine_id = make_medicine(quantity=1)
        with session_factory() as db:
            with pytest.raises(InvalidInput):
                restock_medicine(db, medicine_id, 0)
        assert _stock(session_factory, medicine_id) == 1


class TestConcurrentIssue:
    def _race(self, session_factory, medicine_id, patient_id, quantities):
        barrier = threading.Barrier(len(quantities))
        outcomes = []
        lock = threading.Lock()

        def worker(quantity):
            db = session_factory()
            try:
                barrier.wait()
                issue_medicine(db, medicine_id, patient_id, quantity=quantity)
                result = "ok"
            except InsufficientStock:
                result = "insufficient"
            finally:
                db.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker, args=(q,)) for q in quantities]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)
        return outcomes

    def test_two_issues_of_three_from_five(self, session_factory, make_medicine, make_patient):
        medicine_id = make_medicine(quantity=5)
        outcomes = self._race(session_factory, medicine_id, make_patient(), [3, 3])

        assert sorted(outcomes) == ["insufficient", "ok"]
        assert _stock(session_factory, medicine_id) == 2
        assert _issue_count(session_factory, medicine_id) == 1

    def test_stock_never_negative(self, session_factory, make_medicine, make_patient):
        medicine_id = make_medicine(quantity=5)
        outcomes = self._race(session_factory, medicine_id, make_patient(), [1] * 8)

        assert outcomes.count("ok") == 5
        assert outcomes.count("insufficient") == 3
        assert _stock(session_factory, medicine_id) == 0
        assert _issue_count(session_factory, medicine_id) == 5
