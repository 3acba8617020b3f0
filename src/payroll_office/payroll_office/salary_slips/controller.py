from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, ok, request_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    issuer = container.slip_issuer

    @app.route("/api/salary-slips", methods=["POST"], endpoint="generate_salary_slip")
    def generate_salary_slip():
        slip = issuer.generate(request_json().get("payrollId"), actor=current_actor())
        return ok(slip.to_dict(), status=201, message="Salary slip generated successfully")

    @app.route("/api/salary-slips", methods=["GET"], endpoint="list_salary_slips")
    def list_salary_slips():
        args = request.args
        page = issuer.list(
            month=args.get("month"),
            employee_id=args.get("employeeId"),
            email_sent=args.get("emailSent"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return ok([s.to_dict() for s in page.items], pagination=page.pagination())

    @app.route("/api/salary-slips/<int:slip_id>", methods=["GET"], endpoint="get_salary_slip")
    def get_salary_slip(slip_id: int):
        return ok(issuer.get_by_id(slip_id).to_dict())

    @app.route(
        "/api/salary-slips/employee/<employee_id>/month/<month>",
        methods=["GET"],
        endpoint="get_salary_slip_by_employee_month",
    )
    def get_salary_slip_by_employee_month(employee_id: str, month: str):
        slip = issuer.get_by_employee_and_month(employee_id, month)
        if not slip:
            return ok(None, message="Salary slip not found")
        return ok(slip.to_dict())

    @app.route("/api/salary-slips/<int:slip_id>", methods=["PUT"], endpoint="update_salary_slip")
    def update_salary_slip(slip_id: int):
        slip = issuer.update(slip_id, request_json(), actor=current_actor())
        return ok(slip.to_dict(), message="Salary slip updated successfully")

    @app.route("/api/salary-slips/<int:slip_id>/email", methods=["PATCH"], endpoint="mark_salary_slip_emailed")
    def mark_salary_slip_emailed(slip_id: int):
        slip = issuer.mark_emailed(slip_id, actor=current_actor())
        return ok(slip.to_dict(), message="Salary slip marked as emailed")

    @app.route("/api/salary-slips/<int:slip_id>", methods=["DELETE"], endpoint="delete_salary_slip")
    def delete_salary_slip(slip_id: int):
        issuer.delete(slip_id, actor=current_actor())
        return ok({"id": slip_id}, message="Salary slip deleted successfully")
