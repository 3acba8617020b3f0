from __future__ import annotations

import pytest

from src.payroll_office.payroll_office.core.exceptions import ValidationError
from src.payroll_office.payroll_office.payroll.bulk import BulkPayrollRunner
from src.payroll_office.payroll_office.payroll.service import PayrollService
from tests.fakes import InMemoryPayrolls, InMemoryStore, uow_factory


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add_employee("EMP001", "Asha Patel", account_number="110022003300", ifsc_code="sbin0001234")
    s.add_structure("EMP001", basic_salary=22000)
    s.add_employee("EMP002", "Rahul Verma")
    s.add_structure("EMP002", basic_salary=30000, hra=12000, provident_fund=1800)
    s.add_employee("EMP003", "Meera Nair")
    return s


@pytest.fixture
def runner(store):
    return BulkPayrollRunner(PayrollService(uow_factory(store)))


def test_partial_success_keeps_valid_employee(runner, store):
    outcome = runner.run(month="2024-04", employee_ids=["EMP001", "EMP999"], actor="hr.admin")

    assert outcome.summary == {"processed": 1, "failed": 1, "total": 2}
    assert [p.employee_id for p in store.payrolls.values()] == ["EMP001"]
    assert outcome.results[0]["name"] == "Asha Patel"
    assert outcome.results[0]["accountNumber"] == "110022003300"
    assert outcome.results[0]["ifscCode"] == "SBIN0001234"
    assert outcome.errors == [{"employeeId": "EMP999", "error": "Employee not found", "code": "employee_not_found"}]


def test_each_failure_kind_is_reported(runner, store):
    runner.run(month="2024-04", employee_ids=["EMP001"], actor="hr.admin")

    outcome = runner.run(
        month="2024-04",
        employee_ids=["EMP001", "EMP003", "EMP002"],
        attendance_map={"EMP002": {"presentDays": -3}},
        actor="hr.admin",
    )

    codes = {e["employeeId"]: e["code"] for e in outcome.errors}
    assert codes == {
        "EMP001": "already_processed",
        "EMP003": "structure_not_found",
        "EMP002": "invalid_attendance",
    }
    assert outcome.summary["processed"] == 0
    assert len(store.payrolls) == 1


def test_attendance_map_is_applied_per_employee(runner, store):
    outcome = runner.run(
        month="2024-04",
        employee_ids=["EMP001", "EMP002"],
        attendance_map={"EMP001": {"presentDays": 11, "absentDays": 11}},
        actor="hr.admin",
    )

    net = {r["employeeId"]: r["netSalary"] for r in outcome.results}
    assert net["EMP001"] == 0
    # no attendance entry: zero days worked, allowances minus deductions remain
    assert net["EMP002"] == 12000 - 1800


def test_non_object_attendance_entry_is_invalid_attendance(runner, store):
    outcome = runner.run(
        month="2024-04",
        employee_ids=["EMP001", "EMP002"],
        attendance_map={"EMP001": [1, 2], "EMP002": {"presentDays": 22}},
        actor="hr.admin",
    )

    assert [r["employeeId"] for r in outcome.results] == ["EMP002"]
    assert outcome.errors == [
        {
            "employeeId": "EMP001",
            "error": "Attendance must be an object with presentDays, absentDays, halfDays, leaves",
            "code": "invalid_attendance",
        }
    ]
    assert len(store.payrolls) == 1


def test_unexpected_error_is_captured_and_others_continue(runner, store, monkeypatch):
    original_insert = InMemoryPayrolls.insert

    def flaky_insert(self, record):
        if record.employee_id == "EMP001":
            raise RuntimeError("lost connection")
        return original_insert(self, record)

    monkeypatch.setattr(InMemoryPayrolls, "insert", flaky_insert)

    outcome = runner.run(month="2024-04", employee_ids=["EMP001", "EMP002"], actor="hr.admin")

    assert outcome.errors[0]["code"] == "store_error"
    assert [r["employeeId"] for r in outcome.results] == ["EMP002"]
    assert [p.employee_id for p in store.payrolls.values()] == ["EMP002"]


@pytest.mark.parametrize(
    "month, employee_ids",
    [(None, ["EMP001"]), ("", ["EMP001"]), ("2024-04", None), ("2024-04", "EMP001")],
)
def test_missing_month_or_id_list_is_rejected(runner, month, employee_ids):
    with pytest.raises(ValidationError, match="Month and employeeIds array are required"):
        runner.run(month=month, employee_ids=employee_ids, actor="hr.admin")


def test_empty_id_list_is_a_no_op(runner):
    assert runner.run(month="2024-04", employee_ids=[], actor="hr.admin").to_dict() == {
        "results": [],
        "errors": [],
        "summary": {"processed": 0, "failed": 0, "total": 0},
    }
