"""Example: drive the payroll services directly, without Flask.

Controllers stay thin; the services below are what they call.
"""

import importlib

from config import get_settings_module

from src.payroll_office.payroll_office.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    month = "2024-04"
    outcome = container.bulk_runner.run(
        month=month,
        employee_ids=["EMP001", "EMP002", "EMP999"],
        attendance_map={"EMP002": {"presentDays": 20, "absentDays": 2}},
        actor="example-script",
    )
    print(outcome.to_dict())

    for row in outcome.results:
        slip = container.slip_issuer.generate(row["payrollId"], actor="example-script")
        print(slip.slip_number, row["name"], row["netSalary"])

    print(container.payroll_service.summary(month=month))


if __name__ == "__main__":
    main()
